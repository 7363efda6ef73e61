"""Application data backup and restore.

Two formats:

- app-data JSON: ``{"metadata": {...}, "counts": {...}, "data": {table: [rows]}}``
  with every content, translation, navigation and settings row.
- complete ``.mswbak``: a zip holding ``app-data.json``, ``manifest.json``
  (sizes and SHA-256 checksums) and an ``uploads/`` copy of the media folder.

Users, sessions and API keys are never exported.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterable
from datetime import UTC, datetime
import hashlib
import json
from pathlib import Path, PurePosixPath
import shutil
import sys
import tempfile
from typing import Any
import zipfile

from sqlmodel import Session, SQLModel, delete, select

from toursite.backup.models import BackupFileInfo, BackupKind, BackupResult, RestoreResult
from toursite.content.models import (
    Blog,
    GalleryItem,
    Package,
    SectionContent,
    Testimonial,
)
from toursite.core.base_models import utcnow
from toursite.core.config import settings
from toursite.core.exceptions import BackupError, ResourceNotFoundError, ValidationError
from toursite.core.logging import get_logger
from toursite.navigation.models import (
    NavigationItem,
    NavigationItemTranslation,
    NavigationMenu,
)
from toursite.site_settings.models import SiteSettings
from toursite.translations.models import ContentTranslation

logger = get_logger(__name__)

BACKUP_FORMAT_VERSION = "1.0.0"
APP_DATA_PREFIX = "app-data-"
COMPLETE_PREFIX = "backup-"
COMPLETE_SUFFIX = ".mswbak"
APP_DATA_MEMBER = "app-data.json"
MANIFEST_MEMBER = "manifest.json"
UPLOADS_MEMBER = "uploads"

# Arguments after the interpreter; the archive path is appended
RESTORE_SCRIPT_ARGS: tuple[str, ...] = ("-m", "toursite.scripts.restore_complete")

# Parents before children; restore deletes in reverse
BACKUP_TABLES: tuple[tuple[str, type[SQLModel]], ...] = (
    ("packages", Package),
    ("blogs", Blog),
    ("gallery", GalleryItem),
    ("testimonials", Testimonial),
    ("sections", SectionContent),
    ("content_translations", ContentTranslation),
    ("navigation_menus", NavigationMenu),
    ("navigation_items", NavigationItem),
    ("navigation_item_translations", NavigationItemTranslation),
    ("site_settings", SiteSettings),
)


def _timestamp() -> str:
    return utcnow().strftime("%Y-%m-%dT%H-%M-%S")


def export_app_data(
    session: Session,
    description: str = "Full application data backup including all content and translations",
) -> dict[str, Any]:
    data: dict[str, list[dict[str, Any]]] = {}
    for key, model in BACKUP_TABLES:
        rows = session.exec(select(model)).all()
        data[key] = [row.model_dump(mode="json") for row in rows]

    return {
        "metadata": {
            "timestamp": utcnow().isoformat(),
            "version": BACKUP_FORMAT_VERSION,
            "description": description,
        },
        "counts": {key: len(rows) for key, rows in data.items()},
        "data": data,
    }


def _parents_first(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Order self-referencing navigation items so parents insert first."""
    remaining = list(rows)
    placed: set[str] = set()
    ordered: list[dict[str, Any]] = []
    while remaining:
        ready = [
            row
            for row in remaining
            if not row.get("parent_id") or row["parent_id"] in placed
        ]
        if not ready:
            # Dangling parents; keep the rows as top-level items
            for row in remaining:
                row["parent_id"] = None
            ready = remaining
        for row in ready:
            placed.add(str(row.get("id")))
            ordered.append(row)
        remaining = [row for row in remaining if row not in ready]
    return ordered


def validate_backup_payload(payload: Any) -> dict[str, list[dict[str, Any]]]:
    """Return the ``data`` section of a backup, or raise ValidationError."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise ValidationError("Invalid backup file: missing data section", field="file")
    metadata = payload.get("metadata")
    if not isinstance(metadata, dict) or "version" not in metadata:
        raise ValidationError("Invalid backup file: missing metadata", field="file")

    data = payload["data"]
    for key, _ in BACKUP_TABLES:
        rows = data.get(key, [])
        if rows is None:
            continue
        # Single-row tables may have been exported as one object
        if isinstance(rows, dict):
            data[key] = [rows]
        elif not isinstance(rows, list):
            raise ValidationError(f"Invalid backup file: {key} is not a list", field="file")
    return data


def import_app_data(session: Session, payload: Any) -> dict[str, int]:
    """Replace all backed-up tables with the rows in ``payload``.

    Runs in one transaction; on any failure nothing is changed.

    Raises:
        ValidationError: Payload is not a backup document
        BackupError: Rows could not be written
    """
    data = validate_backup_payload(payload)
    counts: dict[str, int] = {}
    try:
        for _, model in reversed(BACKUP_TABLES):
            session.exec(delete(model))
        session.flush()

        for key, model in BACKUP_TABLES:
            rows = data.get(key) or []
            if model is NavigationItem:
                rows = _parents_first(rows)
            for row in rows:
                session.add(model.model_validate(row))
                # Flush per row so self-references and FKs see their parents
                session.flush()
            counts[key] = len(rows)
        session.commit()
    except ValidationError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.exception("backup_import_failed")
        raise BackupError(f"Restore failed: {e}") from e

    logger.info("backup_imported", counts=counts)
    return counts


def _file_info(path: Path) -> BackupFileInfo:
    kind: BackupKind = "complete" if path.suffix == COMPLETE_SUFFIX else "app-data"
    stat = path.stat()
    return BackupFileInfo(
        filename=path.name,
        kind=kind,
        size=stat.st_size,
        created_at=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
    )


def create_app_data_backup(
    session: Session, backup_dir: Path | None = None
) -> BackupResult:
    backup_dir = backup_dir or settings.BACKUP_DIR
    backup_dir.mkdir(parents=True, exist_ok=True)
    payload = export_app_data(session)

    path = backup_dir / f"{APP_DATA_PREFIX}{_timestamp()}.json"
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("backup_created", filename=path.name, counts=payload["counts"])
    return BackupResult(file=_file_info(path), counts=payload["counts"])


def list_backups(backup_dir: Path | None = None) -> list[BackupFileInfo]:
    """Backup files, newest first."""
    backup_dir = backup_dir or settings.BACKUP_DIR
    if not backup_dir.is_dir():
        return []
    files = [
        path
        for path in backup_dir.iterdir()
        if path.is_file()
        and not path.name.startswith(".")
        and (
            (path.name.startswith(APP_DATA_PREFIX) and path.suffix == ".json")
            or path.suffix == COMPLETE_SUFFIX
        )
    ]
    return sorted(
        (_file_info(path) for path in files), key=lambda f: f.created_at, reverse=True
    )


def resolve_backup_path(filename: str, backup_dir: Path | None = None) -> Path:
    """Map a client-supplied name to a file inside the backup directory.

    Raises:
        ValidationError: The name escapes the backup directory
        ResourceNotFoundError: No such backup
    """
    backup_dir = (backup_dir or settings.BACKUP_DIR).resolve()
    if (
        not filename
        or filename != Path(filename).name
        or "/" in filename
        or "\\" in filename
        or filename in {".", ".."}
    ):
        raise ValidationError("Invalid filename", field="filename")

    path = (backup_dir / filename).resolve()
    if path.parent != backup_dir:
        raise ValidationError("Invalid filename", field="filename")
    if not path.is_file():
        raise ResourceNotFoundError("Backup", filename)
    return path


def delete_backup(filename: str, backup_dir: Path | None = None) -> None:
    path = resolve_backup_path(filename, backup_dir)
    path.unlink()
    logger.info("backup_deleted", filename=filename)


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _iter_files(root: Path) -> Iterable[Path]:
    return (path for path in sorted(root.rglob("*")) if path.is_file())


def create_complete_backup(
    session: Session,
    backup_dir: Path | None = None,
    uploads_dir: Path | None = None,
) -> BackupResult:
    """Write a ``.mswbak`` archive with app data, manifest and uploads.

    A half-written archive is removed on failure.
    """
    backup_dir = backup_dir or settings.BACKUP_DIR
    uploads_dir = uploads_dir or settings.UPLOADS_DIR
    backup_dir.mkdir(parents=True, exist_ok=True)

    payload = export_app_data(session, description="Complete backup: data and uploads")
    archive_path = backup_dir / f"{COMPLETE_PREFIX}{_timestamp()}{COMPLETE_SUFFIX}"

    with tempfile.TemporaryDirectory(dir=backup_dir) as tmp:
        app_data_path = Path(tmp) / APP_DATA_MEMBER
        app_data_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        manifest = {
            "version": BACKUP_FORMAT_VERSION,
            "created_at": utcnow().isoformat(),
            "backup_type": "complete",
            "files": {
                APP_DATA_MEMBER: {
                    "size": app_data_path.stat().st_size,
                    "checksum": _sha256(app_data_path),
                }
            },
            "stats": payload["counts"],
        }

        try:
            with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as archive:
                archive.write(app_data_path, APP_DATA_MEMBER)
                archive.writestr(MANIFEST_MEMBER, json.dumps(manifest, indent=2))
                uploads = 0
                if uploads_dir.is_dir():
                    for path in _iter_files(uploads_dir):
                        relative = path.relative_to(uploads_dir).as_posix()
                        archive.write(path, f"{UPLOADS_MEMBER}/{relative}")
                        uploads += 1
        except OSError as e:
            archive_path.unlink(missing_ok=True)
            raise BackupError(f"Could not write archive: {e}", archive_path.name) from e

    logger.info(
        "complete_backup_created",
        filename=archive_path.name,
        uploads=uploads,
        counts=payload["counts"],
    )
    return BackupResult(file=_file_info(archive_path), counts=payload["counts"])


def _safe_extract(archive: zipfile.ZipFile, target: Path) -> None:
    """Extract every member, refusing absolute paths and ``..`` segments."""
    for member in archive.infolist():
        name = PurePosixPath(member.filename)
        if name.is_absolute() or ".." in name.parts:
            raise BackupError(f"Unsafe path in archive: {member.filename}")
    archive.extractall(target)


def restore_complete_archive(
    session: Session,
    archive_path: Path,
    uploads_dir: Path | None = None,
    log: Callable[[str], None] = print,
) -> RestoreResult:
    """Restore data and uploads from a ``.mswbak`` archive.

    ``log`` receives one human-readable progress line per step.

    Raises:
        BackupError: Not a valid archive or checksum mismatch
        ValidationError: The app data is not a backup document
    """
    uploads_dir = uploads_dir or settings.UPLOADS_DIR
    if not zipfile.is_zipfile(archive_path):
        raise BackupError("Not a valid backup archive", archive_path.name)

    with tempfile.TemporaryDirectory() as tmp:
        workdir = Path(tmp)
        log("Step 1/4: Extracting archive...")
        with zipfile.ZipFile(archive_path) as archive:
            _safe_extract(archive, workdir)

        app_data_path = workdir / APP_DATA_MEMBER
        if not app_data_path.is_file():
            raise BackupError("Archive has no app-data.json", archive_path.name)

        log("Step 2/4: Verifying manifest...")
        manifest_path = workdir / MANIFEST_MEMBER
        if manifest_path.is_file():
            try:
                manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise BackupError(f"manifest.json is not valid JSON: {e}") from e
            expected = manifest.get("files", {}).get(APP_DATA_MEMBER, {}).get("checksum")
            if expected and expected != _sha256(app_data_path):
                raise BackupError("Checksum mismatch for app-data.json", archive_path.name)

        log("Step 3/4: Restoring database...")
        try:
            payload = json.loads(app_data_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise BackupError(f"app-data.json is not valid JSON: {e}") from e
        counts = import_app_data(session, payload)

        log("Step 4/4: Restoring uploads...")
        restored = 0
        uploads_source = workdir / UPLOADS_MEMBER
        if uploads_source.is_dir():
            uploads_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(uploads_source, uploads_dir, dirs_exist_ok=True)
            restored = sum(1 for _ in _iter_files(uploads_source))

    logger.info(
        "complete_backup_restored",
        filename=archive_path.name,
        counts=counts,
        uploads=restored,
    )
    return RestoreResult(counts=counts, uploads_restored=restored)


async def stream_restore_complete(archive_path: Path) -> AsyncIterator[str]:
    """Run the restore script in a subprocess and yield its output lines.

    The archive at ``archive_path`` is a temporary upload; it is deleted when
    the stream ends, whether the restore succeeded, failed or the client left.
    """
    process = None
    try:
        process = await asyncio.create_subprocess_exec(
            sys.executable,
            *RESTORE_SCRIPT_ARGS,
            str(archive_path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        assert process.stdout is not None
        async for raw in process.stdout:
            yield raw.decode("utf-8", errors="replace").rstrip("\n") + "\n"
        code = await process.wait()
        if code == 0:
            yield "RESTORE COMPLETED SUCCESSFULLY\n"
        else:
            yield f"RESTORE FAILED (exit code {code})\n"
        logger.info("restore_subprocess_finished", exit_code=code)
    finally:
        if process is not None and process.returncode is None:
            process.kill()
            await process.wait()
        archive_path.unlink(missing_ok=True)
