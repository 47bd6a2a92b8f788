"""Health check routes."""

from fastapi import APIRouter, Depends

from roomcat_api.dependencies import get_config
from roomcat.config import CatalogConfig

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/catalog")
async def catalog_status(config: CatalogConfig = Depends(get_config)):
    """Check whether the bundled catalog is available."""
    return {
        "catalog_available": config.is_catalog_available(),
        "catalog_path": str(config.catalog_path),
    }
