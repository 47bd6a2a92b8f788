"""Room export routes."""

import logging
import shutil
import tempfile
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from roomcat.catalog import Vocabulary
from roomcat.config import CatalogConfig
from roomcat.room import ExportError, ExportOptions, ExportSession, ShareRoom
from roomcat_api.dependencies import get_config, get_vocabulary

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory export storage (export id -> shared folder)
EXPORTS: dict[str, ShareRoom] = {}

EXPORT_OPTIONS = {
    "all": ExportOptions.ALL,
    "parametric": ExportOptions.PARAMETRIC,
    "model": ExportOptions.MODEL,
}


class ExportResponse(BaseModel):
    """Export result."""

    export_id: str
    state: str
    files: list[str]


def _remove_upload(path: Path) -> None:
    path.unlink(missing_ok=True)


@router.post("", response_model=ExportResponse)
async def export_room(
    room: UploadFile = File(...),
    options: str = Form("all"),
    config: CatalogConfig = Depends(get_config),
    vocabulary: Vocabulary = Depends(get_vocabulary),
):
    """Export an uploaded captured room (JSON) to a model with catalog models applied."""
    export_options = EXPORT_OPTIONS.get(options.lower())
    if export_options is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown export options '{options}'. Use one of: {', '.join(EXPORT_OPTIONS)}",
        )

    content = await room.read()
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as upload:
        upload.write(content)
        upload_path = Path(upload.name)

    export_id = str(uuid.uuid4())[:8]
    session_config = replace(config, export_dir=config.export_dir / export_id)
    session = ExportSession(session_config, vocabulary=vocabulary, on_release=_remove_upload)
    session.select(upload_path)
    state = session.export(export_options)

    if isinstance(state, ExportError):
        _remove_upload(upload_path)
        raise HTTPException(status_code=400, detail=state.description)

    EXPORTS[export_id] = state
    logger.info(f"Exported {room.filename} as {export_id}")
    return ExportResponse(export_id=export_id, state=state.name, files=state.files)


@router.get("/{export_id}", response_model=ExportResponse)
async def get_export(export_id: str):
    """Get the files shared by an export."""
    share = EXPORTS.get(export_id)
    if share is None:
        raise HTTPException(status_code=404, detail="Export not found")
    return ExportResponse(export_id=export_id, state=share.name, files=share.files)


@router.get("/{export_id}/files/{name}")
async def download_export_file(export_id: str, name: str):
    """Download one file of an export."""
    share = EXPORTS.get(export_id)
    if share is None or name not in share.files:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(share.folder / name, filename=name)


@router.delete("/{export_id}")
async def delete_export(export_id: str):
    """Delete an export and its files."""
    share: Optional[ShareRoom] = EXPORTS.pop(export_id, None)
    if share is None:
        raise HTTPException(status_code=404, detail="Export not found")
    shutil.rmtree(share.folder, ignore_errors=True)
    return {"status": "deleted", "export_id": export_id}
