"""Catalog packaging: validates a filled folder hierarchy and bundles it.

Pipeline:
1. Validate the input folder and the bundle extension
2. Check that the top level only holds the Resources folder
3. Convert the model found in every entry folder to the catalog format
4. Write the catalog index
5. Copy the folder into a staging bundle and prune everything that is
   not a generated model, the index or an empty marker
6. Move the staging bundle into place
"""

from __future__ import annotations

import logging
import plistlib
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from roomcat.errors import (
    CannotCreateCatalog,
    CannotParseHierarchy,
    CannotRemoveModelFile,
    FolderHierarchyCompromised,
    FolderHierarchyNotCreated,
    NonExistingPath,
    NotADirectory,
    WrongExtension,
)

from .model import (
    CATALOG_INDEX_FILENAME,
    EMPTY_FILENAME,
    RESOURCES_FOLDER_NAME,
    Catalog,
    CatalogEntry,
)
from .models_io import can_import, convert_to_generated_model, is_generated_model
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)


BUNDLE_EXTENSION = "bundle"


@dataclass
class GenerationReport:
    """Outcome of a catalog generation run."""

    bundle_path: Path
    catalog: Catalog

    @property
    def entry_count(self) -> int:
        return len(self.catalog)

    @property
    def missing_count(self) -> int:
        return self.catalog.missing_model_count


def check_hierarchy(input_path: Path) -> None:
    """Validate the top level of a catalog folder.

    Raises:
        FolderHierarchyNotCreated: If the folder is empty or unreadable.
        FolderHierarchyCompromised: If it holds anything besides the
            Resources folder, the catalog index and hidden files.
    """
    try:
        children = list(input_path.iterdir())
    except OSError as e:
        raise FolderHierarchyNotCreated(input_path) from e

    if not children:
        raise FolderHierarchyNotCreated(input_path)

    for child in children:
        name = child.name
        if child.is_dir():
            if name != RESOURCES_FOLDER_NAME:
                raise FolderHierarchyCompromised(input_path, name)
        elif name != CATALOG_INDEX_FILENAME and not name.startswith("."):
            raise FolderHierarchyCompromised(input_path, name)


def find_model(folder: Path) -> Optional[str]:
    """Return the catalog-format model filename for an entry folder.

    Children are visited in lexicographic order. The first loadable file
    that isn't a generated model is converted and wins; otherwise the
    first generated model already present is reused unchanged.
    """
    generated: Optional[Path] = None
    for child in sorted(folder.iterdir(), key=lambda p: p.name):
        if not child.is_file() or not can_import(child):
            continue
        if is_generated_model(child):
            if generated is None:
                generated = child
            continue
        return convert_to_generated_model(child).name
    return generated.name if generated is not None else None


def clean_catalog_package(path: Path) -> None:
    """Recursively delete every file that is not part of the final catalog.

    Raises:
        CannotParseHierarchy: If a folder cannot be listed.
        CannotRemoveModelFile: If a file cannot be deleted.
    """
    if path.is_dir():
        try:
            children = list(path.iterdir())
        except OSError as e:
            raise CannotParseHierarchy(path, e) from e
        for child in children:
            clean_catalog_package(child)
        return

    if (
        is_generated_model(path)
        or path.name == CATALOG_INDEX_FILENAME
        or path.name == EMPTY_FILENAME
    ):
        return
    try:
        path.unlink()
    except OSError as e:
        raise CannotRemoveModelFile(path, e) from e


def _warn_on_vocabulary_drift(index_path: Path, catalog: Catalog) -> None:
    """Log entries of a previous index that the new catalog no longer covers.

    The previous index is read as plain strings so entries naming removed
    categories or attribute values can still be reported.
    """
    if not index_path.is_file():
        return
    try:
        document = plistlib.loads(index_path.read_bytes())
        items = document["categoryAttributes"]
        previous = [
            (
                item["category"],
                tuple(item.get("attributes", [])),
                item.get("folderRelativePath", ""),
                item.get("modelFilename"),
            )
            for item in items
        ]
    except Exception as e:
        logger.warning(f"Ignoring previous catalog index {index_path}: {e}")
        return

    current_keys = {
        (entry.category, tuple(attribute.tag for attribute in entry.attributes))
        for entry in catalog
    }
    for category, tags, folder_path, model_filename in previous:
        if model_filename and (category, tags) not in current_keys:
            logger.warning(f"{folder_path}/{model_filename} is no longer part of the catalog")


def _write_bundle(input_path: Path, output_path: Path) -> None:
    """Copy, prune and move the catalog folder to ``output_path`` atomically."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    staging_root = Path(tempfile.mkdtemp(prefix=f".{output_path.name}.", dir=output_path.parent))
    try:
        staging = staging_root / output_path.name
        try:
            shutil.copytree(input_path, staging)
        except OSError as e:
            raise CannotCreateCatalog(e) from e

        clean_catalog_package(staging)

        previous = staging_root / "previous"
        try:
            if output_path.is_dir() and not output_path.is_symlink():
                output_path.rename(previous)
            elif output_path.exists():
                output_path.unlink()
            staging.rename(output_path)
        except OSError as e:
            # Put the previous bundle back before the staging root is removed
            if previous.exists() and not output_path.exists():
                previous.rename(output_path)
            raise CannotCreateCatalog(e) from e
    finally:
        shutil.rmtree(staging_root, ignore_errors=True)


def generate_catalog(
    input_path: str | Path,
    output_path: str | Path,
    vocabulary: Optional[Vocabulary] = None,
) -> GenerationReport:
    """Package a filled catalog folder into a ``.bundle``.

    Args:
        input_path: Catalog folder created by create_folder_hierarchy.
        output_path: Destination bundle, must end with ``.bundle``.
        vocabulary: Vocabulary the candidate entries are built from.

    Returns:
        GenerationReport with the bundle location and the enhanced catalog.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    vocabulary = vocabulary or Vocabulary.default()

    if not input_path.exists():
        raise NonExistingPath("input", input_path)
    if not input_path.is_dir():
        raise NotADirectory("input", input_path)
    if output_path.suffix.lower() != f".{BUNDLE_EXTENSION}":
        raise WrongExtension(output_path, [BUNDLE_EXTENSION])
    if output_path.resolve().is_relative_to(input_path.resolve()):
        raise CannotCreateCatalog(
            ValueError(f"bundle {output_path} can't be written inside {input_path}")
        )

    check_hierarchy(input_path)

    # Candidate entries always come from the vocabulary, never from a prior index
    catalog = Catalog.build_default(vocabulary)
    index_path = input_path / CATALOG_INDEX_FILENAME
    _warn_on_vocabulary_drift(index_path, catalog)

    enhanced: list[CatalogEntry] = []
    for entry in catalog:
        folder = input_path / entry.folder_path
        if not folder.is_dir():
            continue

        enhanced_entry = CatalogEntry(
            category=entry.category,
            attributes=entry.attributes,
            folder_path=entry.folder_path,
        )
        empty_marker = folder / EMPTY_FILENAME
        try:
            model_filename = find_model(folder)
        except OSError as e:
            raise CannotParseHierarchy(folder, e) from e

        if model_filename is not None:
            enhanced_entry.add_model_filename(model_filename)
            empty_marker.unlink(missing_ok=True)
        else:
            empty_marker.touch()
        enhanced.append(enhanced_entry)

    enhanced_catalog = Catalog(enhanced)
    try:
        enhanced_catalog.write(index_path)
    except OSError as e:
        raise CannotCreateCatalog(e) from e

    _write_bundle(input_path, output_path)

    report = GenerationReport(bundle_path=output_path, catalog=enhanced_catalog)
    logger.info(
        f"Catalog bundle created at {output_path} "
        f"({report.entry_count} entries, {report.missing_count} missing models)"
    )
    return report
