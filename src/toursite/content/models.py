"""Base-language content models.

Every table here stores content in the primary language (Indonesian).
Other languages live in ``ContentTranslation`` rows keyed by
(content type, content id, language).
"""

from datetime import datetime
from enum import Enum
from typing import Any
import uuid

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from toursite.core.base_models import (
    TimestampedTable,
    TimestampMixin,
    TimestampResponseMixin,
)


class PublishStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------


class PackageBase(SQLModel):
    slug: str = Field(unique=True, index=True, min_length=1, max_length=255)
    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)
    long_description: str | None = Field(default=None)
    price: float | None = Field(default=None, ge=0)
    currency: str = Field(default="IDR", max_length=3)
    duration: str | None = Field(default=None, max_length=100)
    image_url: str | None = Field(default=None, max_length=500)
    gallery_images: list[str] = Field(default_factory=list, sa_type=JSON)
    destinations: list[str] = Field(default_factory=list, sa_type=JSON)
    includes: list[str] = Field(default_factory=list, sa_type=JSON)
    excludes: list[str] = Field(default_factory=list, sa_type=JSON)
    highlights: list[str] = Field(default_factory=list, sa_type=JSON)
    itinerary: list[dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    faqs: list[dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    group_size: str | None = Field(default=None, max_length=100)
    difficulty: str | None = Field(default=None, max_length=100)
    best_for: str | None = Field(default=None, max_length=255)
    departure: str | None = Field(default=None, max_length=255)
    return_point: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    featured: bool = False
    status: PublishStatus = PublishStatus.DRAFT


class Package(PackageBase, TimestampedTable, table=True):
    pass


class PackageCreate(PackageBase):
    pass


class PackageUpdate(SQLModel):
    slug: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    long_description: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, max_length=3)
    duration: str | None = None
    image_url: str | None = None
    gallery_images: list[str] | None = None
    destinations: list[str] | None = None
    includes: list[str] | None = None
    excludes: list[str] | None = None
    highlights: list[str] | None = None
    itinerary: list[dict[str, Any]] | None = None
    faqs: list[dict[str, Any]] | None = None
    group_size: str | None = None
    difficulty: str | None = None
    best_for: str | None = None
    departure: str | None = None
    return_point: str | None = None
    location: str | None = None
    featured: bool | None = None
    status: PublishStatus | None = None


class PackagePublic(PackageBase, TimestampResponseMixin):
    id: uuid.UUID


# ---------------------------------------------------------------------------
# Blogs
# ---------------------------------------------------------------------------


class BlogBase(SQLModel):
    slug: str = Field(unique=True, index=True, min_length=1, max_length=255)
    title: str = Field(min_length=1, max_length=255)
    excerpt: str | None = Field(default=None)
    content: str | None = Field(default=None)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    author: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=500)
    status: PublishStatus = PublishStatus.DRAFT
    published_at: datetime | None = None


class Blog(BlogBase, TimestampedTable, table=True):
    pass


class BlogCreate(BlogBase):
    pass


class BlogUpdate(SQLModel):
    slug: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    excerpt: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    author: str | None = None
    image_url: str | None = None
    status: PublishStatus | None = None
    published_at: datetime | None = None


class BlogPublic(BlogBase, TimestampResponseMixin):
    id: uuid.UUID


# ---------------------------------------------------------------------------
# Gallery
# ---------------------------------------------------------------------------


class GalleryItemBase(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)
    image_url: str = Field(max_length=500)
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    order: int = 0
    featured: bool = False


class GalleryItem(GalleryItemBase, TimestampedTable, table=True):
    __tablename__ = "gallery_item"


class GalleryItemCreate(GalleryItemBase):
    pass


class GalleryItemUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    order: int | None = None
    featured: bool | None = None


class GalleryItemPublic(GalleryItemBase, TimestampResponseMixin):
    id: uuid.UUID


# ---------------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------------


class TestimonialBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    role: str | None = Field(default=None, max_length=255)
    content: str = Field(min_length=1)
    package_name: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    rating: int = Field(default=5, ge=1, le=5)
    avatar_url: str | None = Field(default=None, max_length=500)
    status: ReviewStatus = ReviewStatus.PENDING


class Testimonial(TestimonialBase, TimestampedTable, table=True):
    pass


class TestimonialCreate(TestimonialBase):
    pass


class TestimonialUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: str | None = None
    content: str | None = Field(default=None, min_length=1)
    package_name: str | None = None
    location: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    avatar_url: str | None = None
    status: ReviewStatus | None = None


class TestimonialPublic(TestimonialBase, TimestampResponseMixin):
    id: uuid.UUID


# ---------------------------------------------------------------------------
# Page sections (hero, whoAmI, header, footer, ...)
# ---------------------------------------------------------------------------


class SectionContentBase(SQLModel):
    title: str | None = Field(default=None, max_length=500)
    subtitle: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None)
    cta_text: str | None = Field(default=None, max_length=255)
    cta_link: str | None = Field(default=None, max_length=500)
    button_text: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=500)
    destinations: list[Any] = Field(default_factory=list, sa_type=JSON)
    features: list[Any] = Field(default_factory=list, sa_type=JSON)
    stats: list[Any] = Field(default_factory=list, sa_type=JSON)
    items: list[Any] = Field(default_factory=list, sa_type=JSON)


class SectionContent(SectionContentBase, TimestampMixin, table=True):
    __tablename__ = "section_content"

    section_id: str = Field(primary_key=True, max_length=100)


class SectionContentUpsert(SectionContentBase):
    pass


class SectionContentPublic(SectionContentBase, TimestampResponseMixin):
    section_id: str
