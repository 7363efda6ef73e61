from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal
import uuid

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Field, SQLModel

from toursite.core.base_models import TimestampedTable

TranslationSource = Literal["base", "stored-translation", "machine-translation"]


class ContentTranslation(TimestampedTable, table=True):
    """One language version of a content item's translatable fields."""

    __tablename__ = "content_translation"
    __table_args__ = (
        UniqueConstraint(
            "content_type", "content_id", "language", name="uq_content_translation_key"
        ),
    )

    content_type: str = Field(max_length=50, index=True)
    content_id: str = Field(max_length=100, index=True)
    language: str = Field(max_length=10, index=True)
    fields: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    is_auto_translated: bool = True


class ContentTranslationPublic(SQLModel):
    id: uuid.UUID
    content_type: str
    content_id: str
    language: str
    fields: dict[str, Any]
    is_auto_translated: bool
    created_at: datetime
    updated_at: datetime


class ContentTranslationUpdate(SQLModel):
    """Manual edit of a stored translation from the CMS."""

    fields: dict[str, Any]


class TranslatedContent(SQLModel):
    content_type: str
    content_id: str
    language: str
    fields: dict[str, Any]
    source: TranslationSource
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)


class TranslationTriggerRequest(SQLModel):
    content_type: str = Field(min_length=1)
    content_id: str = Field(min_length=1)
    force_retranslate: bool = False
    languages: list[str] | None = None


class LanguageOutcome(SQLModel):
    language: str
    source: TranslationSource
    degraded: bool
    warnings: list[str] = Field(default_factory=list)


class TranslationTriggerResponse(SQLModel):
    content_type: str
    content_id: str
    results: list[LanguageOutcome]
    logs: list[str]


class TranslationStatus(SQLModel):
    content_type: str
    content_id: str
    has_translation: bool
    translation_count: int
    languages: list[str]
    missing_languages: list[str]


@dataclass
class CorruptedTranslation:
    content_type: str
    content_id: str
    language: str
    flagged_fields: list[str]
    translation_id: uuid.UUID | None = None


@dataclass
class RepairReport:
    mode: str
    scanned: int = 0
    corrupted: list[CorruptedTranslation] = field(default_factory=list)
    repaired: int = 0
    failed: int = 0


class RepairRequest(SQLModel):
    mode: Literal["report", "delete", "retranslate"] = "report"
    content_types: list[str] | None = None
    languages: list[str] | None = None
