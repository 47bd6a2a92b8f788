"""Convert a captured room file with a catalog bundle applied."""

import logging
from pathlib import Path
from typing import Optional

from roomcat.catalog.provider import load_model_provider
from roomcat.catalog.vocabulary import Vocabulary
from roomcat.errors import NonExistingPath

from .exporter import ExportOptions, RoomExporter
from .record import load_captured_room

logger = logging.getLogger(__name__)


def convert_room(
    input_path: str | Path,
    catalog_path: str | Path,
    output_path: str | Path,
    vocabulary: Optional[Vocabulary] = None,
) -> Path:
    """
    Export a room record with its objects replaced by catalog models.

    Args:
        input_path: Room record (.json or .plist)
        catalog_path: Catalog bundle produced by generate_catalog
        output_path: Destination model file (.glb, .gltf, .obj, .ply or .stl)
        vocabulary: Vocabulary the catalog was built with

    Returns:
        Path to the exported model

    Raises:
        NonExistingPath: If the room record or the catalog is missing
        WrongExtension: If the room record or output extension is unsupported
        CannotConvertRoom: If the room record cannot be decoded
        CannotParseCatalog: If the catalog index cannot be decoded
    """
    input_path = Path(input_path)
    catalog_path = Path(catalog_path)
    output_path = Path(output_path)
    vocabulary = vocabulary or Vocabulary.default()

    if not input_path.exists():
        raise NonExistingPath("input", input_path)
    if not catalog_path.exists():
        raise NonExistingPath("catalog", catalog_path)

    room = load_captured_room(input_path)
    provider = load_model_provider(catalog_path, vocabulary=vocabulary)

    exporter = RoomExporter(vocabulary=vocabulary)
    exporter.export(room, output_path, model_provider=provider, options=ExportOptions.MODEL)

    logger.info(f"Converted {input_path} to {output_path}")
    return output_path
