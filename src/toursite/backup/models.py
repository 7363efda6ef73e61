from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

BackupKind = Literal["app-data", "complete"]


class BackupFileInfo(SQLModel):
    filename: str
    kind: BackupKind
    size: int
    created_at: datetime


class BackupResult(SQLModel):
    file: BackupFileInfo
    counts: dict[str, int]


class RestoreResult(SQLModel):
    counts: dict[str, int]
    uploads_restored: int = 0
