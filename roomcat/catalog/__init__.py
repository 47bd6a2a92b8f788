"""Model catalog module for RoomPlan catalog tools.

This module maps object category/attribute combinations to folders on
disk, packages filled folders into catalog bundles and loads bundles
back into a lookup table.

Usage:
    from roomcat.catalog import create_folder_hierarchy, generate_catalog, load_model_provider

    create_folder_hierarchy("~/Catalog")
    # ...drop model files into ~/Catalog/Resources/<Category>/<Combination>/
    report = generate_catalog("~/Catalog", "~/RoomPlanCatalog.bundle")
    provider = load_model_provider(report.bundle_path)
"""

from .hierarchy import create_folder_hierarchy
from .model import (
    CATALOG_INDEX_FILENAME,
    EMPTY_FILENAME,
    RESOURCES_FOLDER_NAME,
    Catalog,
    CatalogEntry,
    derive_folder_path,
)
from .models_io import (
    GENERATED_MODEL_EXTENSION,
    can_import,
    convert_to_generated_model,
    is_generated_model,
)
from .packager import GenerationReport, check_hierarchy, generate_catalog
from .provider import ModelProvider, load_model_provider
from .vocabulary import Attribute, Vocabulary

__all__ = [
    # Catalog index
    "Catalog",
    "CatalogEntry",
    "derive_folder_path",
    "CATALOG_INDEX_FILENAME",
    "EMPTY_FILENAME",
    "RESOURCES_FOLDER_NAME",
    # Vocabulary
    "Attribute",
    "Vocabulary",
    # Folder hierarchy and packaging
    "create_folder_hierarchy",
    "check_hierarchy",
    "generate_catalog",
    "GenerationReport",
    # Model files
    "GENERATED_MODEL_EXTENSION",
    "can_import",
    "convert_to_generated_model",
    "is_generated_model",
    # Lookup
    "ModelProvider",
    "load_model_provider",
]
