"""Catalog inspection routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from roomcat.catalog import CATALOG_INDEX_FILENAME, Catalog, Vocabulary
from roomcat.config import CatalogConfig
from roomcat.errors import CannotParseCatalog
from roomcat_api.dependencies import get_config, get_vocabulary

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_catalog(
    config: CatalogConfig = Depends(get_config),
    vocabulary: Vocabulary = Depends(get_vocabulary),
):
    """Summarize the bundled catalog."""
    if not config.is_catalog_available():
        raise HTTPException(status_code=404, detail="Cannot Find Catalog")

    try:
        catalog = Catalog.read(config.catalog_path / CATALOG_INDEX_FILENAME, vocabulary=vocabulary)
    except CannotParseCatalog as e:
        logger.error(f"Bundled catalog is unreadable: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "path": str(config.catalog_path),
        "entry_count": len(catalog),
        "model_count": len(catalog) - catalog.missing_model_count,
        "entries": [entry.to_dict() for entry in catalog],
    }
