"""Captured room record data classes and decoding."""

import json
import logging
import plistlib
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from roomcat.errors import CannotConvertRoom, NonExistingPath, WrongExtension

logger = logging.getLogger(__name__)


Dimensions = Tuple[float, float, float]

# Record formats accepted by load_captured_room
ROOM_RECORD_EXTENSIONS = ["json", "plist"]

# Surface groups of a captured room, in export order
SURFACE_KINDS = ["walls", "doors", "windows", "openings", "floors"]


def _parse_category(value: Any) -> Tuple[str, Dict[str, Any]]:
    """Accept ``"door"`` or the keyed form ``{"door": {"isOpen": true}}``."""
    if isinstance(value, str):
        return value, {}
    if isinstance(value, dict) and len(value) == 1:
        name, payload = next(iter(value.items()))
        return name, payload if isinstance(payload, dict) else {}
    raise ValueError(f"invalid category: {value!r}")


def _parse_dimensions(value: Any) -> Dimensions:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"dimensions must hold 3 numbers, got {value!r}")
    x, y, z = (float(v) for v in value)
    return (x, y, z)


def _parse_transform(value: Any) -> np.ndarray:
    """Decode a 4x4 transform stored as 16 column-major numbers."""
    if value is None:
        return np.eye(4)
    flat = np.asarray(value, dtype=float).reshape(-1)
    if flat.size != 16:
        raise ValueError(f"transform must hold 16 numbers, got {flat.size}")
    return flat.reshape(4, 4).T


def _parse_attributes(value: Any) -> List[str]:
    """Attribute tags, given as ``["ChairType.dining"]`` or ``{"ChairType": "dining"}``."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [f"{kind}.{val}" for kind, val in value.items()]
    if isinstance(value, list) and all(isinstance(tag, str) for tag in value):
        return list(value)
    raise ValueError(f"invalid attributes: {value!r}")


@dataclass
class Surface:
    """Wall, door, window, opening or floor of a captured room."""

    kind: str
    category: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    dimensions: Dimensions = (0.0, 0.0, 0.0)
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, kind: str, data: Dict[str, Any]) -> "Surface":
        category, details = _parse_category(data.get("category", kind.rstrip("s")))
        return cls(
            kind=kind,
            category=category,
            id=str(data.get("identifier", uuid.uuid4())),
            dimensions=_parse_dimensions(data.get("dimensions", (0.0, 0.0, 0.0))),
            transform=_parse_transform(data.get("transform")),
            details=details,
        )


@dataclass
class RoomObject:
    """Detected object, exported as a box or as a catalog model."""

    category: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    dimensions: Dimensions = (0.0, 0.0, 0.0)
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    attribute_tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomObject":
        if "category" not in data:
            raise ValueError("object is missing its category")
        category, _ = _parse_category(data["category"])
        return cls(
            category=category,
            id=str(data.get("identifier", uuid.uuid4())),
            dimensions=_parse_dimensions(data.get("dimensions", (0.0, 0.0, 0.0))),
            transform=_parse_transform(data.get("transform")),
            attribute_tags=_parse_attributes(data.get("attributes")),
        )


@dataclass
class CapturedRoom:
    """A scanned room as serialized by the capture framework."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    surfaces: List[Surface] = field(default_factory=list)
    objects: List[RoomObject] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "CapturedRoom":
        if not isinstance(data, dict):
            raise ValueError("room record must be a dictionary")

        surfaces = []
        for kind in SURFACE_KINDS:
            for item in data.get(kind, []) or []:
                surfaces.append(Surface.from_dict(kind, item))
        objects = [RoomObject.from_dict(item) for item in data.get("objects", []) or []]

        return cls(
            id=str(data.get("identifier", uuid.uuid4())),
            surfaces=surfaces,
            objects=objects,
        )

    def get_surfaces(self, kind: str) -> List[Surface]:
        return [s for s in self.surfaces if s.kind == kind]


def load_captured_room(path: Path, allowed_extensions: Optional[List[str]] = None) -> CapturedRoom:
    """Decode a room record using the format implied by its extension.

    Raises:
        NonExistingPath: If the file doesn't exist.
        WrongExtension: If the extension is neither .json nor .plist.
        CannotConvertRoom: If the file cannot be read or decoded.
    """
    path = Path(path)
    allowed = allowed_extensions or ROOM_RECORD_EXTENSIONS
    if not path.exists():
        raise NonExistingPath("input", path)

    extension = path.suffix.lower().lstrip(".")
    if extension not in allowed:
        raise WrongExtension(path, allowed)

    try:
        raw = path.read_bytes()
        if extension == "json":
            data = json.loads(raw)
        else:
            data = plistlib.loads(raw)
        room = CapturedRoom.from_dict(data)
    except Exception as e:
        raise CannotConvertRoom(path, e) from e

    logger.info(
        f"Loaded room {room.id} with {len(room.surfaces)} surfaces "
        f"and {len(room.objects)} objects"
    )
    return room
