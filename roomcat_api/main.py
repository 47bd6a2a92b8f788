"""RoomPlan Catalog FastAPI Application"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv()  # Load .env file

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomcat import __version__
from roomcat.config import CatalogConfig

from .routes import catalog, export, health

# Configure logging
logging.basicConfig(
    level=CatalogConfig.from_env().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("Starting RoomPlan Catalog API...")
    yield
    logger.info("Shutting down RoomPlan Catalog API...")


app = FastAPI(
    title="RoomPlan Catalog",
    description="Exports captured rooms with catalog models in place of bounding boxes",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "RoomPlan Catalog",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }
