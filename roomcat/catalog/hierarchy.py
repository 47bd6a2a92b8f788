"""Creation of the empty catalog folder hierarchy."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from roomcat.errors import CannotCreateHierarchy, NotADirectory

from .model import Catalog
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)


def create_folder_hierarchy(
    root: str | Path, vocabulary: Optional[Vocabulary] = None
) -> Catalog:
    """Create one folder per catalog entry under ``root``.

    Existing folders and their contents are left untouched, so running
    this twice only adds what is missing.

    Args:
        root: Catalog folder; created if it doesn't exist.
        vocabulary: Vocabulary to build the catalog from.

    Returns:
        The default catalog whose folders were laid out.

    Raises:
        NotADirectory: If ``root`` exists and is a file.
        CannotCreateHierarchy: If a folder cannot be created.
    """
    root = Path(root)
    if root.exists() and not root.is_dir():
        raise NotADirectory("input", root)

    catalog = Catalog.build_default(vocabulary)
    logger.info(f"Number of attribute combinations: {len(catalog)}")

    created = 0
    try:
        for entry in catalog:
            folder = root / entry.folder_path
            if not folder.exists():
                folder.mkdir(parents=True)
                created += 1
    except OSError as e:
        raise CannotCreateHierarchy(e) from e

    logger.info(f"Created {created} folders under {root}")
    return catalog
