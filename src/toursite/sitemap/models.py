from datetime import datetime
import uuid

from sqlmodel import Field, SQLModel

from toursite.core.base_models import CreatedAtMixin, UUIDPrimaryKeyMixin


class SitemapLog(UUIDPrimaryKeyMixin, CreatedAtMixin, table=True):
    """One sitemap generation run and its search-engine ping results."""

    __tablename__ = "sitemap_log"

    total_pages: int = 0
    last_generated: datetime | None = None
    google_pinged: bool = False
    bing_pinged: bool = False


class SitemapStatus(SQLModel):
    id: uuid.UUID | None = None
    total_pages: int = 0
    last_generated: datetime | None = None
    google_pinged: bool = False
    bing_pinged: bool = False
    sitemap_url: str | None = None
