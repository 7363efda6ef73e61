from toursite.sitemap.models import SitemapLog, SitemapStatus
from toursite.sitemap.service import (
    build_sitemap,
    generate_sitemap,
    get_sitemap_status,
    render_sitemap,
)

__all__ = [
    "SitemapLog",
    "SitemapStatus",
    "build_sitemap",
    "generate_sitemap",
    "get_sitemap_status",
    "render_sitemap",
]
