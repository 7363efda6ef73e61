"""Sitemap rendering and search-engine notification.

``/sitemap.xml`` is rendered on every request from published content. With
multi-language routing on, each page is listed once per language with
``hreflang`` alternates; otherwise pages are listed unprefixed.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote
from xml.etree import ElementTree as ET

from sqlmodel import Session, col, select

from toursite.content.models import Blog, Package, PublishStatus
from toursite.core.base_models import ensure_utc, utcnow
from toursite.core.config import settings
from toursite.core.http import ping
from toursite.core.logging import get_logger
from toursite.i18n.config import PRIMARY_LOCALE, SUPPORTED_LOCALES
from toursite.site_settings.service import get_or_create_site_settings
from toursite.sitemap.models import SitemapLog, SitemapStatus

logger = get_logger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"

GOOGLE_PING_URL = "https://www.google.com/ping?sitemap={sitemap_url}"
BING_PING_URL = "https://www.bing.com/ping?sitemap={sitemap_url}"

PING_TIMEOUT_SECONDS = 10.0

ET.register_namespace("", SITEMAP_NS)
ET.register_namespace("xhtml", XHTML_NS)


@dataclass
class SitemapPage:
    path: str
    last_modified: datetime | None = None
    change_frequency: str = "weekly"
    priority: float = 0.5


def resolve_site_url(session: Session) -> str:
    """Site URL from the CMS settings, else the environment."""
    site_settings = get_or_create_site_settings(session)
    return (site_settings.site_url or settings.SITE_URL).rstrip("/")


def collect_pages(session: Session) -> list[SitemapPage]:
    """Language-neutral paths of every public page."""
    pages = [
        SitemapPage(path="", change_frequency="daily", priority=1.0),
        SitemapPage(path="/packages", change_frequency="daily", priority=0.9),
    ]
    packages = session.exec(
        select(Package)
        .where(Package.status == PublishStatus.PUBLISHED)
        .order_by(col(Package.created_at))
    ).all()
    for package in packages:
        pages.append(
            SitemapPage(
                path=f"/packages/{quote(package.slug)}",
                last_modified=package.updated_at,
                priority=0.8,
            )
        )
    blogs = session.exec(
        select(Blog)
        .where(Blog.status == PublishStatus.PUBLISHED)
        .order_by(col(Blog.created_at))
    ).all()
    for blog in blogs:
        pages.append(
            SitemapPage(
                path=f"/blog/{quote(blog.slug)}",
                last_modified=blog.updated_at,
                change_frequency="monthly",
                priority=0.6,
            )
        )
    return pages


def _localized_url(site_url: str, language: str | None, path: str) -> str:
    if language is None:
        return f"{site_url}{path or '/'}"
    return f"{site_url}/{language}{path}"


def render_sitemap(
    pages: list[SitemapPage], site_url: str, multi_language: bool = True
) -> tuple[bytes, int]:
    """Render pages as sitemap XML.

    Returns:
        Tuple of (XML document, number of ``<url>`` entries)
    """
    urlset = ET.Element(f"{{{SITEMAP_NS}}}urlset")
    codes = [loc.code for loc in SUPPORTED_LOCALES]
    languages: list[str | None] = list(codes) if multi_language else [None]
    count = 0

    for page in pages:
        for language in languages:
            url = ET.SubElement(urlset, f"{{{SITEMAP_NS}}}url")
            ET.SubElement(url, f"{{{SITEMAP_NS}}}loc").text = _localized_url(
                site_url, language, page.path
            )
            if page.last_modified is not None:
                ET.SubElement(url, f"{{{SITEMAP_NS}}}lastmod").text = (
                    ensure_utc(page.last_modified).date().isoformat()
                )
            ET.SubElement(url, f"{{{SITEMAP_NS}}}changefreq").text = page.change_frequency
            ET.SubElement(url, f"{{{SITEMAP_NS}}}priority").text = f"{page.priority:.1f}"
            if multi_language:
                for alternate in codes:
                    ET.SubElement(
                        url,
                        f"{{{XHTML_NS}}}link",
                        rel="alternate",
                        hreflang=alternate,
                        href=_localized_url(site_url, alternate, page.path),
                    )
                ET.SubElement(
                    url,
                    f"{{{XHTML_NS}}}link",
                    rel="alternate",
                    hreflang="x-default",
                    href=_localized_url(site_url, PRIMARY_LOCALE, page.path),
                )
            count += 1

    return ET.tostring(urlset, encoding="utf-8", xml_declaration=True), count


def build_sitemap(session: Session, multi_language: bool = True) -> tuple[bytes, int]:
    return render_sitemap(collect_pages(session), resolve_site_url(session), multi_language)


async def ping_search_engines(sitemap_url: str) -> tuple[bool, bool]:
    """Notify Google and Bing; failures are reported, never raised."""
    encoded = quote(sitemap_url, safe="")
    google, bing = await asyncio.gather(
        ping(GOOGLE_PING_URL.format(sitemap_url=encoded), PING_TIMEOUT_SECONDS),
        ping(BING_PING_URL.format(sitemap_url=encoded), PING_TIMEOUT_SECONDS),
    )
    return google, bing


async def generate_sitemap(
    *, session: Session, multi_language: bool = True, notify: bool | None = None
) -> SitemapStatus:
    """Render the sitemap, ping search engines and record the run."""
    _, total_pages = build_sitemap(session, multi_language)
    sitemap_url = f"{resolve_site_url(session)}/sitemap.xml"

    if notify is None:
        notify = settings.SITEMAP_PING_ENABLED
    google_pinged, bing_pinged = (
        await ping_search_engines(sitemap_url) if notify else (False, False)
    )

    log = SitemapLog(
        total_pages=total_pages,
        last_generated=utcnow(),
        google_pinged=google_pinged,
        bing_pinged=bing_pinged,
    )
    session.add(log)
    session.commit()
    session.refresh(log)
    logger.info(
        "sitemap_generated",
        total_pages=total_pages,
        google_pinged=google_pinged,
        bing_pinged=bing_pinged,
    )
    return SitemapStatus(
        id=log.id,
        total_pages=log.total_pages,
        last_generated=log.last_generated,
        google_pinged=log.google_pinged,
        bing_pinged=log.bing_pinged,
        sitemap_url=sitemap_url,
    )


def get_sitemap_status(*, session: Session) -> SitemapStatus:
    latest = session.exec(
        select(SitemapLog).order_by(col(SitemapLog.created_at).desc())
    ).first()
    if latest is None:
        return SitemapStatus()
    return SitemapStatus(
        id=latest.id,
        total_pages=latest.total_pages,
        last_generated=latest.last_generated or latest.created_at,
        google_pinged=latest.google_pinged,
        bing_pinged=latest.bing_pinged,
        sitemap_url=f"{resolve_site_url(session)}/sitemap.xml",
    )
