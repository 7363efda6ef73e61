import json
from pathlib import Path
import uuid
import zipfile

from fastapi.testclient import TestClient
import pytest
from sqlmodel import Session, select

from toursite.backup import service as backup_service
from toursite.backup.service import (
    APP_DATA_MEMBER,
    COMPLETE_SUFFIX,
    create_app_data_backup,
    create_complete_backup,
    export_app_data,
    import_app_data,
    list_backups,
    resolve_backup_path,
    restore_complete_archive,
)
from toursite.content.crud import create_content
from toursite.content.models import Package, PackageCreate
from toursite.content.registry import ContentType
from toursite.core.exceptions import BackupError, ResourceNotFoundError, ValidationError
from toursite.navigation.crud import ensure_menu
from toursite.navigation.models import NavigationItem, NavigationItemTranslation
from toursite.translations.models import ContentTranslation
from toursite.translations.store import upsert_translation


@pytest.fixture
def seeded(session: Session) -> Package:
    package = create_content(
        session=session,
        content_type=ContentType.PACKAGE,
        data=PackageCreate(slug="bromo", title="Sunrise Bromo", highlights=["Kawah"]),
    )
    upsert_translation(
        session=session,
        content_type="package",
        content_id=str(package.id),
        language="en",
        fields={"title": "Bromo Sunrise"},
    )
    ensure_menu(session=session)
    return package


def test_export_contains_every_table(session: Session, seeded: Package) -> None:
    payload = export_app_data(session)

    assert payload["metadata"]["version"] == "1.0.0"
    assert payload["counts"]["packages"] == 1
    assert payload["counts"]["content_translations"] == 1
    assert payload["counts"]["navigation_items"] == 6
    assert payload["counts"]["navigation_item_translations"] == 12
    assert "users" not in payload["data"]
    assert payload["data"]["packages"][0]["slug"] == "bromo"


def test_import_replaces_current_data(session: Session, seeded: Package) -> None:
    payload = json.loads(json.dumps(export_app_data(session)))
    create_content(
        session=session,
        content_type=ContentType.PACKAGE,
        data=PackageCreate(slug="extra", title="Extra"),
    )

    counts = import_app_data(session, payload)

    assert counts["packages"] == 1
    slugs = [p.slug for p in session.exec(select(Package)).all()]
    assert slugs == ["bromo"]
    assert len(session.exec(select(NavigationItem)).all()) == 6
    assert len(session.exec(select(NavigationItemTranslation)).all()) == 12
    row = session.exec(select(ContentTranslation)).one()
    assert row.fields == {"title": "Bromo Sunrise"}


def test_invalid_payload_is_rejected_without_changes(
    session: Session, seeded: Package
) -> None:
    with pytest.raises(ValidationError):
        import_app_data(session, {"data": {}})
    with pytest.raises(ValidationError):
        import_app_data(session, ["not", "a", "backup"])

    assert len(session.exec(select(Package)).all()) == 1


def test_failed_import_rolls_back(session: Session, seeded: Package) -> None:
    payload = export_app_data(session)
    # Same slug under a new id violates the unique constraint
    payload["data"]["packages"].append(
        dict(payload["data"]["packages"][0], id=str(uuid.uuid4()))
    )

    with pytest.raises(BackupError):
        import_app_data(session, payload)

    session.expire_all()
    assert [p.slug for p in session.exec(select(Package)).all()] == ["bromo"]


def test_app_data_backup_file(session: Session, seeded: Package, tmp_path: Path) -> None:
    result = create_app_data_backup(session, backup_dir=tmp_path)

    assert result.file.kind == "app-data"
    assert result.file.filename.startswith("app-data-")
    assert (tmp_path / result.file.filename).is_file()
    (tmp_path / ".upload-partial.mswbak").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")
    assert [f.filename for f in list_backups(tmp_path)] == [result.file.filename]


@pytest.mark.parametrize(
    "filename", ["../secret.json", "..", "a/b.json", "..\\x.json", ""]
)
def test_backup_names_cannot_escape_directory(tmp_path: Path, filename: str) -> None:
    with pytest.raises(ValidationError):
        resolve_backup_path(filename, tmp_path)


def test_missing_backup_is_not_found(tmp_path: Path) -> None:
    with pytest.raises(ResourceNotFoundError):
        resolve_backup_path("app-data-missing.json", tmp_path)


def test_complete_backup_round_trip(
    session: Session, seeded: Package, tmp_path: Path
) -> None:
    uploads = tmp_path / "uploads"
    (uploads / "packages").mkdir(parents=True)
    (uploads / "packages" / "bromo.jpg").write_bytes(b"jpeg")

    result = create_complete_backup(
        session, backup_dir=tmp_path / "backups", uploads_dir=uploads
    )
    archive = tmp_path / "backups" / result.file.filename
    assert archive.suffix == COMPLETE_SUFFIX
    with zipfile.ZipFile(archive) as zf:
        names = set(zf.namelist())
    assert {APP_DATA_MEMBER, "manifest.json", "uploads/packages/bromo.jpg"} <= names

    restored_uploads = tmp_path / "restored"
    lines: list[str] = []
    restored = restore_complete_archive(
        session, archive, uploads_dir=restored_uploads, log=lines.append
    )

    assert restored.counts["packages"] == 1
    assert restored.uploads_restored == 1
    assert (restored_uploads / "packages" / "bromo.jpg").read_bytes() == b"jpeg"
    assert lines[0] == "Step 1/4: Extracting archive..."
    assert len(lines) == 4


def test_tampered_archive_fails_checksum(
    session: Session, seeded: Package, tmp_path: Path
) -> None:
    archive = tmp_path / "tampered.mswbak"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr(APP_DATA_MEMBER, json.dumps(export_app_data(session)))
        zf.writestr(
            "manifest.json",
            json.dumps({"files": {APP_DATA_MEMBER: {"checksum": "0" * 64}}}),
        )

    with pytest.raises(BackupError):
        restore_complete_archive(session, archive, uploads_dir=tmp_path / "u", log=print)


def test_archive_with_unsafe_member_is_refused(session: Session, tmp_path: Path) -> None:
    archive = tmp_path / "evil.mswbak"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("../escape.txt", "x")
        zf.writestr(APP_DATA_MEMBER, "{}")

    with pytest.raises(BackupError):
        restore_complete_archive(session, archive, uploads_dir=tmp_path / "u", log=print)
    assert not (tmp_path / "escape.txt").exists()


def test_backup_endpoints(
    admin_client: TestClient, seeded: Package, backup_dir: Path
) -> None:
    response = admin_client.post("/api/backup/app-data")
    assert response.status_code == 201
    filename = response.json()["file"]["filename"]

    listing = admin_client.get("/api/backup/").json()
    assert [item["filename"] for item in listing] == [filename]

    download = admin_client.get(f"/api/backup/files/{filename}")
    assert download.status_code == 200
    assert download.json()["counts"]["packages"] == 1

    response = admin_client.post(f"/api/backup/files/{filename}/restore")
    assert response.status_code == 200
    assert response.json()["counts"]["packages"] == 1

    assert admin_client.delete(f"/api/backup/files/{filename}").status_code == 200
    assert admin_client.get("/api/backup/").json() == []


def test_restore_from_upload(admin_client: TestClient, session: Session, seeded: Package) -> None:
    payload = export_app_data(session)
    payload["data"]["packages"] = []
    payload["data"]["content_translations"] = []

    response = admin_client.post(
        "/api/backup/restore",
        files={"file": ("backup.json", json.dumps(payload), "application/json")},
    )

    assert response.status_code == 200
    assert response.json()["counts"]["packages"] == 0
    session.expire_all()
    assert session.exec(select(Package)).all() == []


def test_restore_rejects_bad_uploads(admin_client: TestClient) -> None:
    response = admin_client.post(
        "/api/backup/restore",
        files={"file": ("backup.json", "{oops", "application/json")},
    )
    assert response.status_code == 400

    response = admin_client.post(
        "/api/backup/restore-complete",
        files={"file": ("backup.zip", b"PK", "application/zip")},
    )
    assert response.status_code == 400


def test_backup_requires_manage_options(editor_client: TestClient) -> None:
    assert editor_client.get("/api/backup/").status_code == 403


@pytest.mark.parametrize(
    ("script", "tail"),
    [
        (
            "import sys; print('Restoring', sys.argv[1].endswith('.mswbak'))",
            "RESTORE COMPLETED SUCCESSFULLY",
        ),
        ("import sys; print('Error: boom'); sys.exit(3)", "RESTORE FAILED (exit code 3)"),
    ],
)
def test_restore_complete_streams_output_and_removes_upload(
    admin_client: TestClient,
    session: Session,
    seeded: Package,
    backup_dir: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    script: str,
    tail: str,
) -> None:
    result = create_complete_backup(
        session, backup_dir=tmp_path / "archives", uploads_dir=tmp_path / "uploads"
    )
    archive = tmp_path / "archives" / result.file.filename
    monkeypatch.setattr(backup_service, "RESTORE_SCRIPT_ARGS", ("-c", script))

    response = admin_client.post(
        "/api/backup/restore-complete",
        files={"file": ("site.mswbak", archive.read_bytes(), "application/zip")},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    lines = response.text.splitlines()
    assert lines[-1] == tail
    assert len(lines) == 2
    assert list(backup_dir.glob(".upload-*")) == []


def test_corrupt_manifest_is_a_backup_error(
    session: Session, seeded: Package, tmp_path: Path
) -> None:
    archive = tmp_path / "broken.mswbak"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr(APP_DATA_MEMBER, json.dumps(export_app_data(session)))
        zf.writestr("manifest.json", "{not json")

    with pytest.raises(BackupError, match="manifest.json"):
        restore_complete_archive(session, archive, uploads_dir=tmp_path / "u", log=print)
