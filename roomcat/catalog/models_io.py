"""Model file helpers: recognition, conversion to the catalog format, loading."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import trimesh
import trimesh.exchange.load

from roomcat.errors import CannotConvertModel

logger = logging.getLogger(__name__)


# Format every catalog model is converted to
GENERATED_MODEL_EXTENSION = "glb"

# Sub-extension marking a file as produced by the catalog generator
GENERATED_MODEL_SUBEXTENSION = "rooms"

# Mesh loaders that yield point clouds or serialized data rather than surfaces
NON_SURFACE_FORMATS = {"xyz", "dict", "dict64", "json", "msgpack"}


def can_import(path: str | Path) -> bool:
    """Check if trimesh can load a file as a 3D mesh based on its extension.

    2D path formats (dxf, svg), archives and point clouds are not models.
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    if not suffix:
        return False
    return suffix in trimesh.exchange.load.mesh_formats() - NON_SURFACE_FORMATS


def is_generated_model(path: str | Path) -> bool:
    """Check if a path carries the ``.rooms.glb`` double extension."""
    path = Path(path)
    suffixes = [s.lower() for s in path.suffixes]
    return (
        len(suffixes) >= 2
        and suffixes[-1] == f".{GENERATED_MODEL_EXTENSION}"
        and suffixes[-2] == f".{GENERATED_MODEL_SUBEXTENSION}"
    )


def generated_model_path(path: str | Path) -> Path:
    """Replace the last extension of a path with ``.rooms.glb``."""
    path = Path(path)
    return path.with_name(
        f"{path.stem}.{GENERATED_MODEL_SUBEXTENSION}.{GENERATED_MODEL_EXTENSION}"
    )


def convert_to_generated_model(source: str | Path) -> Path:
    """Produce the catalog-format sibling of a model file.

    A source already in binary glTF is copied byte for byte; anything
    else is loaded and re-exported through trimesh.

    Args:
        source: Model file in any format trimesh can load.

    Returns:
        Path of the generated ``.rooms.glb`` file.

    Raises:
        CannotConvertModel: If the file cannot be loaded or exported.
    """
    source = Path(source)
    target = generated_model_path(source)

    try:
        if source.suffix.lower() == f".{GENERATED_MODEL_EXTENSION}":
            if target.exists():
                target.unlink()
            shutil.copyfile(source, target)
        else:
            asset = trimesh.load(str(source))
            asset.export(str(target), file_type=GENERATED_MODEL_EXTENSION)
    except Exception as e:
        # Leave nothing half-written next to the source
        if target.exists():
            target.unlink()
        raise CannotConvertModel(source, e) from e

    logger.info(f"Generated {target.name} from {source.name}")
    return target


def load_model_mesh(path: str | Path) -> trimesh.Trimesh | None:
    """Load a model file as a single mesh.

    Scenes are merged into one mesh. Returns None when the file holds
    no geometry.
    """
    asset = trimesh.load(str(path))
    if isinstance(asset, trimesh.Scene):
        meshes = [g for g in asset.geometry.values() if isinstance(g, trimesh.Trimesh)]
        if not meshes:
            return None
        return trimesh.util.concatenate(meshes)
    if isinstance(asset, trimesh.Trimesh):
        return asset
    return None
