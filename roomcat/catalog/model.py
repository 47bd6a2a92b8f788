"""Catalog index data types and their property-list serialization."""

from __future__ import annotations

import logging
import plistlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

from roomcat.errors import CannotParseCatalog

from .vocabulary import Attribute, Vocabulary

logger = logging.getLogger(__name__)


# Name of the catalog index at the root of a catalog folder or bundle
CATALOG_INDEX_FILENAME = "catalog.plist"

# Marker written into folders that were checked and hold no model
EMPTY_FILENAME = ".empty"

# Only directory allowed at the top level of a catalog folder
RESOURCES_FOLDER_NAME = "Resources"

# Leaf folder for entries without attributes
DEFAULT_FOLDER_NAME = "Default"

CatalogKey = tuple[str, tuple[Attribute, ...]]


def derive_folder_path(category: str, attributes: Sequence[Attribute] = ()) -> str:
    """Return the catalog-relative folder for a category/attribute pair.

    Attributes are joined in the given order, so the same set in a
    different order maps to a different folder.

    >>> derive_folder_path("storage")
    'Resources/Storage/Default'
    """
    path = f"{RESOURCES_FOLDER_NAME}/{category.capitalize()}"
    if not attributes:
        return f"{path}/{DEFAULT_FOLDER_NAME}"
    attribute_path = "_".join(attribute.short_identifier for attribute in attributes)
    attribute_path = attribute_path[:1].upper() + attribute_path[1:]
    return f"{path}/{attribute_path}"


@dataclass
class CatalogEntry:
    """One category/attribute combination and the model that replaces it."""

    category: str
    attributes: tuple[Attribute, ...] = ()
    folder_path: str = ""
    model_filename: Optional[str] = None

    def __post_init__(self) -> None:
        self.attributes = tuple(self.attributes)
        if not self.folder_path:
            self.folder_path = derive_folder_path(self.category, self.attributes)

    @property
    def key(self) -> CatalogKey:
        return (self.category, self.attributes)

    @property
    def has_model(self) -> bool:
        return self.model_filename is not None

    def add_model_filename(self, model_filename: str) -> None:
        self.model_filename = model_filename

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "folderRelativePath": self.folder_path,
            "category": self.category,
            "attributes": [attribute.tag for attribute in self.attributes],
        }
        # Property lists cannot hold None; a missing key means "no model"
        if self.model_filename is not None:
            data["modelFilename"] = self.model_filename
        return data

    @classmethod
    def from_dict(cls, data: Any, vocabulary: Vocabulary) -> "CatalogEntry":
        """Decode an entry, resolving attribute tags against the vocabulary.

        Raises:
            ValueError: If the entry is malformed or names unknown tags.
        """
        if not isinstance(data, dict):
            raise ValueError(f"entry must be a dictionary, got {type(data).__name__}")

        folder_path = data.get("folderRelativePath")
        category = data.get("category")
        tags = data.get("attributes", [])
        model_filename = data.get("modelFilename")

        if not isinstance(folder_path, str) or not folder_path:
            raise ValueError("entry is missing folderRelativePath")
        if not isinstance(category, str) or not vocabulary.has_category(category):
            raise ValueError(f"unknown category {category!r}")
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise ValueError(f"attributes of {category} must be a list of tags")
        if model_filename is not None and not isinstance(model_filename, str):
            raise ValueError(f"modelFilename of {folder_path} must be a string")

        try:
            attributes = tuple(vocabulary.attribute(category, tag) for tag in tags)
        except KeyError as e:
            raise ValueError(f"unknown attribute: {e.args[0]}") from e

        return cls(
            category=category,
            attributes=attributes,
            folder_path=folder_path,
            model_filename=model_filename,
        )


@dataclass
class Catalog:
    """Ordered catalog index; insertion order is creation order."""

    entries: list[CatalogEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[CatalogKey] = set()
        for entry in self.entries:
            if entry.key in seen:
                raise ValueError(
                    f"Duplicate catalog entry for {entry.category} {list(map(str, entry.attributes))}"
                )
            seen.add(entry.key)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def build_default(cls, vocabulary: Optional[Vocabulary] = None) -> "Catalog":
        """Create a catalog covering every attribute combination of the vocabulary.

        Categories without attribute kinds are skipped. Every other category
        gets a Default entry followed by one entry per supported combination.
        """
        vocabulary = vocabulary or Vocabulary.default()
        entries: list[CatalogEntry] = []
        for category in vocabulary.categories():
            if not vocabulary.attribute_kinds(category):
                continue
            entries.append(CatalogEntry(category=category))
            for attributes in vocabulary.supported_combinations(category):
                entries.append(CatalogEntry(category=category, attributes=attributes))
        return cls(entries)

    def find(self, category: str, attributes: Iterable[Attribute] = ()) -> Optional[CatalogEntry]:
        key = (category, tuple(attributes))
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    @property
    def missing_model_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.has_model)

    def to_dict(self) -> dict[str, Any]:
        return {"categoryAttributes": [entry.to_dict() for entry in self.entries]}

    def to_plist_bytes(self) -> bytes:
        return plistlib.dumps(self.to_dict(), fmt=plistlib.FMT_XML, sort_keys=True)

    @classmethod
    def from_plist_bytes(
        cls,
        data: bytes,
        vocabulary: Optional[Vocabulary] = None,
        path: Optional[Path] = None,
    ) -> "Catalog":
        """Decode a serialized catalog.

        Raises:
            CannotParseCatalog: If the document is malformed or references
                categories or attributes outside the vocabulary.
        """
        vocabulary = vocabulary or Vocabulary.default()
        try:
            document = plistlib.loads(data)
        except Exception as e:
            raise CannotParseCatalog(path, f"malformed property list ({e})", e) from e

        if not isinstance(document, dict) or not isinstance(
            document.get("categoryAttributes"), list
        ):
            raise CannotParseCatalog(path, "missing categoryAttributes array")

        try:
            entries = [
                CatalogEntry.from_dict(item, vocabulary)
                for item in document["categoryAttributes"]
            ]
            return cls(entries)
        except ValueError as e:
            raise CannotParseCatalog(path, str(e), e) from e

    def write(self, path: str | Path) -> Path:
        """Write the catalog index, replacing any existing file."""
        path = Path(path)
        path.write_bytes(self.to_plist_bytes())
        logger.info(f"Wrote catalog index with {len(self.entries)} entries to {path}")
        return path

    @classmethod
    def read(cls, path: str | Path, vocabulary: Optional[Vocabulary] = None) -> "Catalog":
        """Read a catalog index from disk.

        Raises:
            CannotParseCatalog: If the file cannot be read or decoded.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise CannotParseCatalog(path, f"cannot read file ({e})", e) from e
        return cls.from_plist_bytes(data, vocabulary=vocabulary, path=path)
