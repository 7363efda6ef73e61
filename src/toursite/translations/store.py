"""Persistence for content translations.

At most one row exists per (content type, content id, language); writes go
through :func:`upsert_translation`, which overwrites in place.
"""

from datetime import timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, delete, func, select

from toursite.core.base_models import ensure_utc, utcnow
from toursite.core.logging import get_logger
from toursite.translations.models import ContentTranslation

logger = get_logger(__name__)


def _key(content_type: Any) -> str:
    return getattr(content_type, "value", content_type)


def get_translation(
    *, session: Session, content_type: str, content_id: str, language: str
) -> ContentTranslation | None:
    statement = select(ContentTranslation).where(
        ContentTranslation.content_type == _key(content_type),
        ContentTranslation.content_id == content_id,
        ContentTranslation.language == language,
    )
    return session.exec(statement).first()


def list_translations(
    *,
    session: Session,
    content_type: str | None = None,
    content_id: str | None = None,
    language: str | None = None,
) -> list[ContentTranslation]:
    statement = select(ContentTranslation)
    if content_type is not None:
        statement = statement.where(ContentTranslation.content_type == _key(content_type))
    if content_id is not None:
        statement = statement.where(ContentTranslation.content_id == content_id)
    if language is not None:
        statement = statement.where(ContentTranslation.language == language)
    statement = statement.order_by(
        col(ContentTranslation.content_type),
        col(ContentTranslation.content_id),
        col(ContentTranslation.language),
    )
    return list(session.exec(statement).all())


def count_translations(*, session: Session, content_type: str, content_id: str) -> int:
    statement = (
        select(func.count())
        .select_from(ContentTranslation)
        .where(
            ContentTranslation.content_type == _key(content_type),
            ContentTranslation.content_id == content_id,
        )
    )
    return session.exec(statement).one()


def upsert_translation(
    *,
    session: Session,
    content_type: str,
    content_id: str,
    language: str,
    fields: dict[str, Any],
    is_auto_translated: bool = True,
) -> ContentTranslation:
    """Insert or overwrite the translation for a key.

    The row's ``updated_at`` always advances. A concurrent insert of the same
    key is resolved by retrying as an update, so the later write wins.
    """
    existing = get_translation(
        session=session,
        content_type=content_type,
        content_id=content_id,
        language=language,
    )
    if existing is None:
        row = ContentTranslation(
            content_type=_key(content_type),
            content_id=content_id,
            language=language,
            fields=fields,
            is_auto_translated=is_auto_translated,
        )
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            existing = get_translation(
                session=session,
                content_type=content_type,
                content_id=content_id,
                language=language,
            )
            if existing is None:
                raise
        else:
            session.refresh(row)
            logger.debug(
                "translation_inserted",
                content_type=row.content_type,
                content_id=content_id,
                language=language,
            )
            return row

    existing.fields = dict(fields)
    existing.is_auto_translated = is_auto_translated
    now = utcnow()
    previous = ensure_utc(existing.updated_at)
    existing.updated_at = now if now > previous else previous + timedelta(microseconds=1)
    session.add(existing)
    session.commit()
    session.refresh(existing)
    logger.debug(
        "translation_updated",
        content_type=existing.content_type,
        content_id=content_id,
        language=language,
    )
    return existing


def delete_translation(*, session: Session, translation: ContentTranslation) -> None:
    session.delete(translation)
    session.commit()


def delete_translations(
    *,
    session: Session,
    content_type: str,
    content_id: str,
    language: str | None = None,
    commit: bool = True,
) -> int:
    """Delete every translation of an item (optionally one language only)."""
    statement = delete(ContentTranslation).where(
        col(ContentTranslation.content_type) == _key(content_type),
        col(ContentTranslation.content_id) == content_id,
    )
    if language is not None:
        statement = statement.where(col(ContentTranslation.language) == language)
    result = session.exec(statement)  # type: ignore[call-overload]
    if commit:
        session.commit()
    return int(result.rowcount or 0)
