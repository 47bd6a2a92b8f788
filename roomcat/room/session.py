"""Export session driving the interactive room export flow.

States:
    SelectRoom -> ExportRoom(path) -> ShareRoom(folder) | ExportError(description)

Transitions only happen on user actions (select, export, acknowledge)
and on completion of the blocking export call.
"""

import json
import logging
import shutil
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

from roomcat.catalog.provider import load_model_provider
from roomcat.catalog.vocabulary import Vocabulary
from roomcat.config import CatalogConfig
from roomcat.errors import CannotFindCatalog

from .exporter import ExportOptions, RoomExporter
from .record import CapturedRoom

logger = logging.getLogger(__name__)


ROOM_RECORD_NAME = "Room.json"
ROOM_MODEL_NAME = "Room.glb"
ROOM_METADATA_NAME = "Room.plist"


@dataclass
class SelectRoom:
    name: str = "select_room"


@dataclass
class ExportRoom:
    path: Path
    name: str = "export_room"


@dataclass
class ShareRoom:
    folder: Path
    files: List[str] = field(default_factory=list)
    name: str = "share_room"


@dataclass
class ExportError:
    description: str
    name: str = "export_error"


ExportState = Union[SelectRoom, ExportRoom, ShareRoom, ExportError]


@contextmanager
def scoped_access(
    path: Path, on_release: Optional[Callable[[Path], None]] = None
) -> Iterator[BinaryIO]:
    """Open a user-selected file and release it on every exit path."""
    handle = Path(path).open("rb")
    try:
        yield handle
    finally:
        handle.close()
        if on_release is not None:
            on_release(Path(path))
        logger.debug(f"Released access to {path}")


class ExportSession:
    """
    Holds the export state of one user.

    Usage:
        session = ExportSession(CatalogConfig.from_env())
        session.select("~/Downloads/Room.json")
        state = session.export(ExportOptions.ALL)
        if isinstance(state, ShareRoom):
            share(state.folder)
    """

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        vocabulary: Optional[Vocabulary] = None,
        on_release: Optional[Callable[[Path], None]] = None,
    ):
        self.config = config or CatalogConfig.from_env()
        self.vocabulary = vocabulary or Vocabulary.default()
        self.on_release = on_release
        self.state: ExportState = SelectRoom()

    def select(self, path: Union[str, Path]) -> ExportState:
        self.state = ExportRoom(path=Path(path).expanduser())
        return self.state

    def acknowledge_error(self) -> ExportState:
        if isinstance(self.state, ExportError):
            self.state = SelectRoom()
        return self.state

    def reset(self) -> ExportState:
        self.state = SelectRoom()
        return self.state

    def export(self, options: ExportOptions = ExportOptions.ALL) -> ExportState:
        """Export the selected room into the export folder."""
        if not isinstance(self.state, ExportRoom):
            self.state = ExportError(description="No captured room selected")
            return self.state

        room_path = self.state.path
        try:
            with scoped_access(room_path, on_release=self.on_release) as handle:
                data = handle.read()
        except OSError as e:
            logger.warning(f"Cannot access {room_path}: {e}")
            self.state = ExportError(description=f"Cannot access {room_path.name}")
            return self.state

        try:
            self.state = self._export(data, options)
        except Exception as e:
            logger.exception(f"Room export failed for {room_path}")
            self.state = ExportError(description=f"Room export failed: {e}")
        return self.state

    def _export(self, data: bytes, options: ExportOptions) -> ShareRoom:
        export_dir = self.config.export_dir
        if export_dir.exists():
            shutil.rmtree(export_dir)

        room = CapturedRoom.from_dict(json.loads(data))
        export_dir.mkdir(parents=True)
        (export_dir / ROOM_RECORD_NAME).write_bytes(data)

        provider = None
        if ExportOptions.MODEL in options:
            if not self.config.is_catalog_available():
                raise CannotFindCatalog(self.config.catalog_path)
            provider = load_model_provider(self.config.catalog_path, vocabulary=self.vocabulary)

        exporter = RoomExporter(vocabulary=self.vocabulary)
        exporter.export(
            room,
            export_dir / ROOM_MODEL_NAME,
            model_provider=provider,
            options=options,
            metadata_path=export_dir / ROOM_METADATA_NAME,
        )
        files = sorted(p.name for p in export_dir.iterdir())
        return ShareRoom(folder=export_dir, files=files)
