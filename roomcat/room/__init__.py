"""Captured room decoding and export with catalog models applied."""

from .converter import convert_room
from .exporter import EXPORT_EXTENSIONS, ExportOptions, RoomExporter
from .record import CapturedRoom, RoomObject, Surface, load_captured_room
from .session import (
    ExportError,
    ExportRoom,
    ExportSession,
    SelectRoom,
    ShareRoom,
    scoped_access,
)

__all__ = [
    "convert_room",
    "CapturedRoom",
    "RoomObject",
    "Surface",
    "load_captured_room",
    "RoomExporter",
    "ExportOptions",
    "EXPORT_EXTENSIONS",
    "ExportSession",
    "SelectRoom",
    "ExportRoom",
    "ShareRoom",
    "ExportError",
    "scoped_access",
]
