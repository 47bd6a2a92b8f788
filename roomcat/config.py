"""Catalog tool configuration management."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_CATALOG_NAME = "RoomPlanCatalog.bundle"


@dataclass
class CatalogConfig:
    """Runtime configuration shared by the CLI and the export service."""

    # Bundled catalog used by the export service
    catalog_path: Path = field(default_factory=lambda: Path(DEFAULT_CATALOG_NAME))

    # Folder receiving exported rooms before they are shared
    export_dir: Path = field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "Export"
    )

    # Optional JSON vocabulary replacing the built-in categories
    vocabulary_path: Optional[Path] = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Load configuration from environment variables."""
        vocabulary = os.getenv("ROOMCAT_VOCABULARY")
        return cls(
            catalog_path=Path(
                os.path.expanduser(os.getenv("ROOMCAT_CATALOG_PATH", DEFAULT_CATALOG_NAME))
            ),
            export_dir=Path(
                os.path.expanduser(
                    os.getenv(
                        "ROOMCAT_EXPORT_DIR",
                        str(Path(tempfile.gettempdir()) / "Export"),
                    )
                )
            ),
            vocabulary_path=Path(os.path.expanduser(vocabulary)) if vocabulary else None,
            log_level=os.getenv("ROOMCAT_LOG_LEVEL", "INFO").upper(),
        )

    def is_catalog_available(self) -> bool:
        """Check if the bundled catalog exists on disk."""
        return self.catalog_path.is_dir()
