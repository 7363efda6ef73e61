from toursite.content.crud import (
    create_content,
    delete_content,
    get_content,
    get_content_by_slug_or_id,
    list_content,
    update_content,
    upsert_section,
)
from toursite.content.models import (
    Blog,
    GalleryItem,
    Package,
    PublishStatus,
    ReviewStatus,
    SectionContent,
    Testimonial,
)
from toursite.content.registry import (
    CONTENT_REGISTRY,
    ContentSpec,
    ContentType,
    get_content_spec,
)

__all__ = [
    # Models
    "Blog",
    "GalleryItem",
    "Package",
    "PublishStatus",
    "ReviewStatus",
    "SectionContent",
    "Testimonial",
    # Registry
    "CONTENT_REGISTRY",
    "ContentSpec",
    "ContentType",
    "get_content_spec",
    # CRUD
    "create_content",
    "delete_content",
    "get_content",
    "get_content_by_slug_or_id",
    "list_content",
    "update_content",
    "upsert_section",
]
