"""Base models and mixins for SQLModel schemas.

Usage:
    - Database models (table=True) inherit from composed base classes
    - Response schemas use TimestampResponseMixin for timestamp fields
    - List responses use PaginatedResponse[T] generic

Example:
    class Package(PackageBase, TimestampedTable, table=True):
        ...
"""

from datetime import UTC, datetime
from typing import Generic, TypeVar
import uuid

from sqlmodel import Field, SQLModel

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from the database.

    SQLite drops tzinfo on round-trip, PostgreSQL ``timestamp`` columns do too.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class UUIDPrimaryKeyMixin(SQLModel):
    """Standard UUID primary key."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


class TimestampMixin(SQLModel):
    """Created/updated timestamps."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class CreatedAtMixin(SQLModel):
    """Created timestamp only (for append-only rows like sessions and logs)."""

    created_at: datetime = Field(default_factory=utcnow)


class TimestampedTable(UUIDPrimaryKeyMixin, TimestampMixin):
    """Base for tables with a UUID key and timestamps.

    Use for: Package, Blog, GalleryItem, Testimonial, User, navigation tables
    """

    pass


class TimestampResponseMixin(SQLModel):
    """For Public/Response schemas that include timestamps."""

    created_at: datetime
    updated_at: datetime


class PaginatedResponse(SQLModel, Generic[T]):
    """Standard paginated response wrapper.

    Example:
        @router.get("/packages", response_model=PaginatedResponse[PackagePublic])
        def list_packages(...):
            return PaginatedResponse(data=packages, count=count)
    """

    data: list[T]
    count: int


class Message(SQLModel):
    message: str
