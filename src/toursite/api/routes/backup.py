"""Backup and restore routes (administrators only)."""

import json
from pathlib import Path
import tempfile
from typing import Any

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse, StreamingResponse

from toursite.auth import SessionDep, require_capability
from toursite.auth.roles import Capability
from toursite.backup import (
    BackupFileInfo,
    BackupResult,
    RestoreResult,
    create_app_data_backup,
    create_complete_backup,
    delete_backup,
    import_app_data,
    list_backups,
    resolve_backup_path,
    restore_complete_archive,
    stream_restore_complete,
)
from toursite.backup.service import COMPLETE_SUFFIX
from toursite.core.base_models import Message
from toursite.core.config import settings
from toursite.core.exceptions import ValidationError
from toursite.core.logging import get_logger
from toursite.core.rate_limit import BACKUP_RATE_LIMIT, limiter

router = APIRouter(
    prefix="/backup",
    tags=["backup"],
    dependencies=[Depends(require_capability(Capability.MANAGE_OPTIONS))],
)
logger = get_logger(__name__)

# Bytes to MB conversion
MB = 1024 * 1024
UPLOAD_CHUNK_SIZE = 1 * MB


async def _save_upload(file: UploadFile, suffix: str) -> Path:
    settings.BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=settings.BACKUP_DIR, prefix=".upload-", suffix=suffix, delete=False
    ) as tmp:
        while chunk := await file.read(UPLOAD_CHUNK_SIZE):
            tmp.write(chunk)
    return Path(tmp.name)


@router.get("/", response_model=list[BackupFileInfo])
def read_backups() -> Any:
    """Stored backups, newest first."""
    return list_backups()


@router.post("/app-data", response_model=BackupResult, status_code=201)
@limiter.limit(BACKUP_RATE_LIMIT)
def create_app_data_backup_endpoint(
    request: Request,  # Required for rate limiter
    session: SessionDep,
) -> Any:
    """Write a JSON backup of content, translations, navigation and settings."""
    return create_app_data_backup(session)


@router.post("/complete", response_model=BackupResult, status_code=201)
@limiter.limit(BACKUP_RATE_LIMIT)
def create_complete_backup_endpoint(
    request: Request,  # Required for rate limiter
    session: SessionDep,
) -> Any:
    """Write a ``.mswbak`` archive with the app data and all uploads."""
    return create_complete_backup(session)


@router.get("/files/{filename}")
def download_backup(filename: str) -> FileResponse:
    path = resolve_backup_path(filename)
    media_type = "application/zip" if path.suffix == COMPLETE_SUFFIX else "application/json"
    return FileResponse(path, media_type=media_type, filename=path.name)


@router.delete("/files/{filename}", response_model=Message)
def delete_backup_endpoint(filename: str) -> Any:
    delete_backup(filename)
    return Message(message="Backup deleted successfully")


@router.post("/files/{filename}/restore", response_model=RestoreResult)
def restore_stored_backup(filename: str, session: SessionDep) -> Any:
    """Restore from a backup already in the backup directory."""
    path = resolve_backup_path(filename)
    if path.suffix == COMPLETE_SUFFIX:
        return restore_complete_archive(
            session, path, log=lambda line: logger.info("restore_progress", step=line)
        )
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Backup is not valid JSON: {e}", field="filename") from e
    return RestoreResult(counts=import_app_data(session, payload))


@router.post("/restore", response_model=RestoreResult)
async def restore_app_data_upload(
    session: SessionDep, file: UploadFile = File(...)
) -> Any:
    """Replace all backed-up tables with the contents of an uploaded JSON backup.

    Runs in one transaction: on any failure nothing is changed.
    """
    raw = await file.read()
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Backup is not valid JSON: {e}", field="file") from e
    counts = import_app_data(session, payload)
    logger.info("backup_restored_from_upload", filename=file.filename, counts=counts)
    return RestoreResult(counts=counts)


@router.post("/restore-complete", response_class=StreamingResponse)
async def restore_complete_upload(file: UploadFile = File(...)) -> StreamingResponse:
    """Restore an uploaded ``.mswbak`` archive, streaming progress as plain text.

    The last line is ``RESTORE COMPLETED SUCCESSFULLY`` or
    ``RESTORE FAILED (exit code N)``.
    """
    if not (file.filename or "").endswith(COMPLETE_SUFFIX):
        raise ValidationError(
            f"Expected a {COMPLETE_SUFFIX} archive", field="file"
        )
    archive_path = await _save_upload(file, COMPLETE_SUFFIX)
    logger.info("restore_complete_started", filename=file.filename)
    return StreamingResponse(
        stream_restore_complete(archive_path),
        media_type="text/plain; charset=utf-8",
        headers={"X-Accel-Buffering": "no", "Cache-Control": "no-cache"},
    )
