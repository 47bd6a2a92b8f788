"""Lookup table from categories and attribute combinations to model files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from roomcat.errors import ModelProviderError

from .model import CATALOG_INDEX_FILENAME, Catalog
from .models_io import can_import
from .vocabulary import Attribute, Vocabulary

logger = logging.getLogger(__name__)


class ModelProvider:
    """Resolves the model file that replaces an object's bounding box.

    Attribute-specific models take precedence over the category model.
    Objects with neither keep their bounding box.
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self.vocabulary = vocabulary or Vocabulary.default()
        self._category_models: dict[str, Path] = {}
        self._attribute_models: dict[tuple[str, tuple[Attribute, ...]], Path] = {}

    def __len__(self) -> int:
        return len(self._category_models) + len(self._attribute_models)

    def _validate_file(self, path: Path) -> None:
        if not path.is_file():
            raise ModelProviderError(f"Model file {path} doesn't exist")
        if not can_import(path):
            raise ModelProviderError(f"Model file {path} has an unsupported format")

    def set_model_file(self, path: str | Path, category: str) -> None:
        """Register the model used for every object of a category."""
        path = Path(path)
        if not self.vocabulary.has_category(category):
            raise ModelProviderError(f"Unknown category {category}")
        self._validate_file(path)
        self._category_models[category] = path

    def set_model_file_for_attributes(
        self, path: str | Path, category: str, attributes: Sequence[Attribute]
    ) -> None:
        """Register the model used for one attribute combination of a category."""
        path = Path(path)
        attributes = tuple(attributes)
        if attributes not in self.vocabulary.supported_combinations(category):
            tags = ", ".join(a.tag for a in attributes)
            raise ModelProviderError(f"{category} doesn't support attributes [{tags}]")
        self._validate_file(path)
        self._attribute_models[(category, attributes)] = path

    def model_path(
        self, category: str, attributes: Iterable[Attribute] = ()
    ) -> Optional[Path]:
        attributes = tuple(attributes)
        if attributes:
            path = self._attribute_models.get((category, attributes))
            if path is not None:
                return path
        return self._category_models.get(category)


def load_model_provider(
    catalog_root: str | Path, vocabulary: Optional[Vocabulary] = None
) -> ModelProvider:
    """Build a ModelProvider from a packaged catalog.

    Entries that cannot be registered are logged and skipped so one bad
    entry never blocks the rest of the catalog.

    Raises:
        CannotParseCatalog: If the catalog index cannot be read or decoded.
    """
    catalog_root = Path(catalog_root).resolve()
    vocabulary = vocabulary or Vocabulary.default()
    catalog = Catalog.read(catalog_root / CATALOG_INDEX_FILENAME, vocabulary=vocabulary)

    provider = ModelProvider(vocabulary)
    for entry in catalog:
        if entry.model_filename is None:
            continue
        model_path = catalog_root / entry.folder_path / entry.model_filename
        try:
            if entry.attributes:
                provider.set_model_file_for_attributes(model_path, entry.category, entry.attributes)
            else:
                provider.set_model_file(model_path, entry.category)
        except ModelProviderError as e:
            logger.warning(f"Can't add {model_path.name} to ModelProvider: {e}")

    logger.info(f"Loaded {len(provider)} models from {catalog_root}")
    return provider
