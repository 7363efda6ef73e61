"""Translatable content types.

Maps each content type tag to its table, how its ids are parsed, and which
of its fields are sent for translation. Everything that works across
content types (translation resolver, repair, coverage, backup) goes through
this registry.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any
import uuid

from sqlmodel import Session, SQLModel, select

from toursite.content.models import (
    Blog,
    GalleryItem,
    Package,
    SectionContent,
    Testimonial,
)
from toursite.core.exceptions import ValidationError


class ContentType(str, Enum):
    PACKAGE = "package"
    BLOG = "blog"
    GALLERY = "gallery"
    TESTIMONIAL = "testimonial"
    SECTION = "section"


@dataclass(frozen=True)
class ContentSpec:
    content_type: ContentType
    model: type[SQLModel]
    label: str
    translatable_fields: tuple[str, ...]
    parse_id: Callable[[str], Any]
    id_attribute: str = "id"
    title_field: str = "title"

    def get(self, session: Session, content_id: str) -> SQLModel | None:
        try:
            key = self.parse_id(content_id)
        except ValueError:
            return None
        return session.get(self.model, key)

    def iter_items(self, session: Session) -> Iterator[SQLModel]:
        yield from session.exec(select(self.model)).all()

    def item_id(self, item: SQLModel) -> str:
        return str(getattr(item, self.id_attribute))

    def base_fields(self, item: SQLModel) -> dict[str, Any]:
        return {name: getattr(item, name) for name in self.translatable_fields}


CONTENT_REGISTRY: dict[ContentType, ContentSpec] = {
    ContentType.PACKAGE: ContentSpec(
        content_type=ContentType.PACKAGE,
        model=Package,
        label="Package",
        translatable_fields=(
            "title",
            "description",
            "long_description",
            "destinations",
            "includes",
            "excludes",
            "highlights",
            "itinerary",
            "faqs",
            "group_size",
            "difficulty",
            "best_for",
            "departure",
            "return_point",
            "location",
        ),
        parse_id=uuid.UUID,
    ),
    ContentType.BLOG: ContentSpec(
        content_type=ContentType.BLOG,
        model=Blog,
        label="Blog",
        translatable_fields=("title", "excerpt", "content", "category", "tags"),
        parse_id=uuid.UUID,
    ),
    ContentType.GALLERY: ContentSpec(
        content_type=ContentType.GALLERY,
        model=GalleryItem,
        label="Gallery item",
        translatable_fields=("title", "description", "tags"),
        parse_id=uuid.UUID,
    ),
    ContentType.TESTIMONIAL: ContentSpec(
        content_type=ContentType.TESTIMONIAL,
        model=Testimonial,
        label="Testimonial",
        translatable_fields=("name", "role", "content", "package_name", "location"),
        parse_id=uuid.UUID,
        title_field="name",
    ),
    ContentType.SECTION: ContentSpec(
        content_type=ContentType.SECTION,
        model=SectionContent,
        label="Section",
        translatable_fields=(
            "title",
            "subtitle",
            "description",
            "cta_text",
            "button_text",
            "destinations",
            "features",
            "stats",
            "items",
        ),
        parse_id=str,
        id_attribute="section_id",
    ),
}


def get_content_spec(content_type: str | ContentType) -> ContentSpec:
    """Look up a content type, raising a 400 for unknown tags."""
    try:
        return CONTENT_REGISTRY[ContentType(content_type)]
    except ValueError as e:
        raise ValidationError(
            f"Unknown content type: {content_type}", field="content_type"
        ) from e
