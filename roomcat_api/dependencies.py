"""Shared FastAPI dependencies."""

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException

from roomcat.catalog import Vocabulary
from roomcat.config import CatalogConfig
from roomcat.errors import CannotParseVocabulary

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> CatalogConfig:
    """Configuration loaded once from the environment."""
    return CatalogConfig.from_env()


def get_vocabulary(config: CatalogConfig = Depends(get_config)) -> Vocabulary:
    if config.vocabulary_path is None:
        return Vocabulary.default()
    try:
        return Vocabulary.from_file(config.vocabulary_path)
    except CannotParseVocabulary as e:
        logger.error(f"Configured vocabulary is unusable: {e}")
        raise HTTPException(status_code=500, detail=str(e))
