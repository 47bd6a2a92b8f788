"""Export a captured room to a 3D model, replacing objects with catalog models."""

import enum
import logging
import plistlib
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import trimesh

from roomcat.catalog.models_io import load_model_mesh
from roomcat.catalog.provider import ModelProvider
from roomcat.catalog.vocabulary import Attribute, Vocabulary
from roomcat.errors import WrongExtension

from .record import CapturedRoom, RoomObject, Surface

logger = logging.getLogger(__name__)


# Output formats the exporter can write
EXPORT_EXTENSIONS = ["glb", "gltf", "obj", "ply", "stl"]

# Formats without a node hierarchy; the room is written as one merged mesh
SINGLE_MESH_EXTENSIONS = {"obj", "ply", "stl"}


class ExportOptions(enum.Flag):
    """What the exported model contains.

    Surfaces are always written as boxes. MODEL only changes how objects
    are written, so MODEL and ALL produce the same scene; ALL exists to
    mirror the capture framework's option set.
    """

    PARAMETRIC = 1  # surfaces and objects as boxes
    MODEL = 2  # objects replaced by catalog models
    ALL = 3


class RoomExporter:
    """
    Builds a trimesh scene from a captured room.

    Surfaces become thin boxes placed with their transform. Objects become
    boxes, or, when MODEL is requested and the provider knows the object,
    the catalog model recentred and scaled to the object's dimensions.
    """

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        surface_thickness: float = 0.02,
    ):
        self.vocabulary = vocabulary or Vocabulary.default()
        self.surface_thickness = surface_thickness
        self._model_cache: Dict[Path, Optional[trimesh.Trimesh]] = {}

    def export(
        self,
        room: CapturedRoom,
        output_path: Path,
        model_provider: Optional[ModelProvider] = None,
        options: ExportOptions = ExportOptions.PARAMETRIC,
        metadata_path: Optional[Path] = None,
    ) -> Path:
        """
        Write the room to ``output_path``.

        Args:
            room: Decoded captured room
            output_path: Destination file (.glb, .gltf, .obj, .ply or .stl)
            model_provider: Catalog lookup used when MODEL is requested
            options: Export options
            metadata_path: Optional .plist sidecar describing every node

        Returns:
            The output path
        """
        output_path = Path(output_path)
        file_type = output_path.suffix.lower().lstrip(".")
        if file_type not in EXPORT_EXTENSIONS:
            raise WrongExtension(output_path, EXPORT_EXTENSIONS)

        provider = model_provider if ExportOptions.MODEL in options else None
        meshes, metadata = self.build_meshes(room, provider)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        if file_type in SINGLE_MESH_EXTENSIONS:
            combined = trimesh.util.concatenate([mesh for _, mesh in meshes])
            combined.export(str(output_path), file_type=file_type)
        else:
            scene = trimesh.Scene()
            for node_name, mesh in meshes:
                scene.add_geometry(mesh, node_name=node_name, geom_name=node_name)
            scene.export(str(output_path), file_type=file_type)

        if metadata_path is not None:
            document = {"room": room.id, "nodes": metadata}
            Path(metadata_path).write_bytes(plistlib.dumps(document, fmt=plistlib.FMT_XML))

        substituted = sum(1 for info in metadata.values() if "model" in info)
        logger.info(
            f"Exported room {room.id} to {output_path} "
            f"({len(meshes)} nodes, {substituted} catalog models)"
        )
        return output_path

    def build_meshes(
        self, room: CapturedRoom, model_provider: Optional[ModelProvider] = None
    ) -> Tuple[List[Tuple[str, trimesh.Trimesh]], Dict[str, dict]]:
        """Create world-space meshes and per-node metadata for a room."""
        meshes: List[Tuple[str, trimesh.Trimesh]] = []
        metadata: Dict[str, dict] = {}
        counters: Dict[str, int] = {}

        def next_name(prefix: str) -> str:
            index = counters.get(prefix, 0)
            counters[prefix] = index + 1
            return f"{prefix}_{index}"

        for surface in room.surfaces:
            name = next_name(surface.kind.rstrip("s"))
            meshes.append((name, self._surface_mesh(surface)))
            metadata[name] = {
                "kind": surface.kind,
                "category": surface.category,
                "identifier": surface.id,
            }

        for obj in room.objects:
            name = next_name(obj.category)
            info = {"kind": "objects", "category": obj.category, "identifier": obj.id}
            mesh = None
            if model_provider is not None:
                model_path = model_provider.model_path(obj.category, self.resolve_attributes(obj))
                if model_path is not None:
                    mesh = self._fitted_model(model_path, obj.dimensions)
                    if mesh is not None:
                        info["model"] = model_path.name
            if mesh is None:
                mesh = self._box(obj.dimensions)
            mesh.apply_transform(obj.transform)
            meshes.append((name, mesh))
            metadata[name] = info

        return meshes, metadata

    def resolve_attributes(self, obj: RoomObject) -> Tuple[Attribute, ...]:
        """Resolve an object's tags, ordered like the category's attribute kinds.

        Unknown tags are dropped so the object falls back to its category model.
        """
        kinds = self.vocabulary.attribute_kinds(obj.category)
        resolved = []
        for tag in obj.attribute_tags:
            try:
                resolved.append(self.vocabulary.attribute(obj.category, tag))
            except KeyError:
                logger.debug(f"Ignoring attribute {tag} of {obj.category} {obj.id}")
        resolved.sort(key=lambda attribute: kinds.index(attribute.kind))
        return tuple(resolved)

    def _box(self, dimensions) -> trimesh.Trimesh:
        extents = [max(float(d), self.surface_thickness) for d in dimensions]
        return trimesh.creation.box(extents=extents)

    def _surface_mesh(self, surface: Surface) -> trimesh.Trimesh:
        mesh = self._box(surface.dimensions)
        mesh.apply_transform(surface.transform)
        return mesh

    def _fitted_model(self, path: Path, dimensions) -> Optional[trimesh.Trimesh]:
        """Load a catalog model, centre it and stretch it to the object's box."""
        if path not in self._model_cache:
            try:
                self._model_cache[path] = load_model_mesh(path)
            except Exception as e:
                logger.warning(f"Failed to load catalog model {path}: {e}")
                self._model_cache[path] = None
        source = self._model_cache[path]
        if source is None or len(source.vertices) == 0:
            return None

        mesh = source.copy()
        mesh.apply_translation(-mesh.bounds.mean(axis=0))
        extents = mesh.extents
        target = np.array([max(float(d), self.surface_thickness) for d in dimensions])
        scale = np.where(extents > 0, target / np.where(extents > 0, extents, 1.0), 1.0)
        mesh.apply_transform(np.diag([scale[0], scale[1], scale[2], 1.0]))
        return mesh
