"""Import every table model so SQLModel.metadata is complete.

Used by ``create_db_and_tables`` and Alembic's ``env.py``.
"""

from sqlmodel import SQLModel

from toursite.auth.models import User, UserSession
from toursite.content.models import (
    Blog,
    GalleryItem,
    Package,
    SectionContent,
    Testimonial,
)
from toursite.navigation.models import (
    NavigationItem,
    NavigationItemTranslation,
    NavigationMenu,
)
from toursite.site_settings.models import ApiKeySettings, SiteSettings
from toursite.sitemap.models import SitemapLog
from toursite.translations.models import ContentTranslation

__all__ = [
    "ApiKeySettings",
    "Blog",
    "ContentTranslation",
    "GalleryItem",
    "NavigationItem",
    "NavigationItemTranslation",
    "NavigationMenu",
    "Package",
    "SQLModel",
    "SectionContent",
    "SiteSettings",
    "SitemapLog",
    "Testimonial",
    "User",
    "UserSession",
]
