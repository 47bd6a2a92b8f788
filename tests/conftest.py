"""Shared fixtures for catalog and room export tests."""

import json
from pathlib import Path

import pytest
import trimesh

from roomcat.catalog import Vocabulary, create_folder_hierarchy


IDENTITY = [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0]


def write_box_model(path: Path, extents=(1.0, 1.0, 1.0)) -> Path:
    """Write a box mesh in the format implied by the path's extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    box = trimesh.creation.box(extents=list(extents))
    file_type = path.suffix.lstrip(".").lower()
    box.export(str(path), file_type=file_type)
    return path


def translation(x: float, y: float, z: float) -> list:
    """Column-major 4x4 transform with a translation."""
    values = list(IDENTITY)
    values[12:15] = [x, y, z]
    return values


@pytest.fixture
def vocabulary():
    return Vocabulary.default()


@pytest.fixture
def catalog_dir(tmp_path):
    """A freshly created, empty catalog folder hierarchy."""
    root = tmp_path / "Catalog"
    create_folder_hierarchy(root)
    return root


@pytest.fixture
def room_data():
    """A small captured room in the capture framework's JSON layout."""
    return {
        "identifier": "room-1",
        "walls": [
            {
                "identifier": "wall-1",
                "category": {"wall": {}},
                "dimensions": [4.0, 2.5, 0.0],
                "transform": translation(0.0, 1.25, -2.0),
            }
        ],
        "doors": [
            {
                "identifier": "door-1",
                "category": {"door": {"isOpen": False}},
                "dimensions": [0.9, 2.1, 0.0],
                "transform": translation(1.0, 1.05, -2.0),
            }
        ],
        "windows": [],
        "openings": [],
        "objects": [
            {
                "identifier": "object-1",
                "category": {"storage": {}},
                "dimensions": [1.0, 2.0, 0.5],
                "transform": IDENTITY,
                "attributes": ["StorageType.cabinet"],
            },
            {
                "identifier": "object-2",
                "category": "chair",
                "dimensions": [0.5, 0.9, 0.5],
                "transform": translation(2.0, 0.45, 0.0),
            },
        ],
    }


@pytest.fixture
def room_file(tmp_path, room_data):
    path = tmp_path / "Room.json"
    path.write_text(json.dumps(room_data))
    return path
