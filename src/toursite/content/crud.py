from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, select

from toursite.content.models import SectionContent, SectionContentUpsert
from toursite.content.registry import ContentSpec, ContentType, get_content_spec
from toursite.core.base_models import utcnow
from toursite.core.db import paginate
from toursite.core.exceptions import ResourceExistsError, ResourceNotFoundError
from toursite.core.logging import get_logger
from toursite.translations.store import delete_translations

logger = get_logger(__name__)

T = TypeVar("T", bound=SQLModel)


def _commit(session: Session, obj: SQLModel, spec: ContentSpec) -> None:
    session.add(obj)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ResourceExistsError(spec.label, "slug") from e
    session.refresh(obj)


def create_content(
    *, session: Session, content_type: ContentType, data: SQLModel
) -> SQLModel:
    """Create a content item from a ``*Create`` schema.

    Raises:
        ResourceExistsError: A unique field (slug) is already taken
    """
    spec = get_content_spec(content_type)
    db_obj = spec.model.model_validate(data)
    _commit(session, db_obj, spec)
    logger.info(
        "content_created", content_type=spec.content_type.value, id=spec.item_id(db_obj)
    )
    return db_obj


def get_content(
    *, session: Session, content_type: ContentType, content_id: str
) -> SQLModel:
    """Get a content item by id.

    Raises:
        ResourceNotFoundError: No item with this id
    """
    spec = get_content_spec(content_type)
    item = spec.get(session, content_id)
    if item is None:
        raise ResourceNotFoundError(spec.label, content_id)
    return item


def get_content_by_slug_or_id(
    *, session: Session, content_type: ContentType, key: str
) -> SQLModel:
    """Page routes accept either a slug or an id."""
    spec = get_content_spec(content_type)
    item = spec.get(session, key)
    if item is None and hasattr(spec.model, "slug"):
        statement = select(spec.model).where(spec.model.slug == key)  # type: ignore[attr-defined]
        item = session.exec(statement).first()
    if item is None:
        raise ResourceNotFoundError(spec.label, key)
    return item


def list_content(
    *,
    session: Session,
    content_type: ContentType,
    skip: int = 0,
    limit: int = 100,
    filters: dict[str, Any] | None = None,
) -> tuple[list[SQLModel], int]:
    """List content items, newest first, with optional equality filters."""
    spec = get_content_spec(content_type)
    model: Any = spec.model
    statement = select(model)
    for name, value in (filters or {}).items():
        if value is not None:
            statement = statement.where(getattr(model, name) == value)

    if hasattr(model, "order"):
        order_by = model.order
    else:
        order_by = model.created_at.desc()
    return paginate(session, statement, skip=skip, limit=limit, order_by=order_by)


def update_content(
    *, session: Session, content_type: ContentType, db_obj: SQLModel, data: SQLModel
) -> SQLModel:
    """Apply a partial update.

    Stored translations are left as they are; editors re-run the translation
    trigger with force to refresh them.
    """
    spec = get_content_spec(content_type)
    update_data = data.model_dump(exclude_unset=True)
    db_obj.sqlmodel_update(update_data, update={"updated_at": utcnow()})
    _commit(session, db_obj, spec)
    logger.info(
        "content_updated",
        content_type=spec.content_type.value,
        id=spec.item_id(db_obj),
        fields=sorted(update_data),
    )
    return db_obj


def delete_content(
    *, session: Session, content_type: ContentType, db_obj: SQLModel
) -> None:
    """Delete an item together with all of its stored translations."""
    spec = get_content_spec(content_type)
    item_id = spec.item_id(db_obj)
    removed = delete_translations(
        session=session, content_type=spec.content_type, content_id=item_id, commit=False
    )
    session.delete(db_obj)
    session.commit()
    logger.info(
        "content_deleted",
        content_type=spec.content_type.value,
        id=item_id,
        translations_removed=removed,
    )


def upsert_section(
    *, session: Session, section_id: str, data: SectionContentUpsert
) -> SectionContent:
    """Create or replace the content of a page section."""
    section = session.get(SectionContent, section_id)
    values = data.model_dump(exclude_unset=True)
    if section is None:
        section = SectionContent.model_validate(values, update={"section_id": section_id})
    else:
        section.sqlmodel_update(values, update={"updated_at": utcnow()})
    session.add(section)
    session.commit()
    session.refresh(section)
    logger.info("section_saved", section_id=section_id, fields=sorted(values))
    return section
