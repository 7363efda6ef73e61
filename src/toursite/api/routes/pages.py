"""Public page data behind the language-prefixed site URLs.

The locale middleware guarantees every page request arrives here as
``/{lang}/...``: it redirects unprefixed paths or rewrites them to the
primary language, depending on the routing toggle.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path

from toursite.api.deps import ResolverDep
from toursite.api.routes.content import localize_item
from toursite.auth import SessionDep
from toursite.content import ContentType, get_content_by_slug_or_id, list_content
from toursite.content.models import PublishStatus, ReviewStatus
from toursite.core.exceptions import ResourceNotFoundError
from toursite.i18n.config import SUPPORTED_LOCALE_CODES
from toursite.navigation import (
    DEFAULT_LOCATION,
    build_hierarchy,
    ensure_menu,
    get_menu_items,
)
from toursite.site_settings import get_or_create_site_settings

router = APIRouter(tags=["pages"])

HOME_LIMIT = 6


def get_page_language(lang: Annotated[str, Path(description="Language prefix")]) -> str:
    if lang not in SUPPORTED_LOCALE_CODES:
        raise ResourceNotFoundError("Page", f"/{lang}")
    return lang


PageLanguageDep = Annotated[str, Depends(get_page_language)]


async def _localized_list(
    session: SessionDep,
    resolver: ResolverDep,
    content_type: ContentType,
    language: str,
    *,
    limit: int = 100,
    filters: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    items, _ = list_content(
        session=session, content_type=content_type, limit=limit, filters=filters
    )
    return [await localize_item(resolver, content_type, item, language) for item in items]


def _navigation(session: SessionDep, language: str) -> list[Any]:
    menu = ensure_menu(session=session, location=DEFAULT_LOCATION)
    items = [item for item in get_menu_items(session=session, menu=menu) if item.is_active]
    return build_hierarchy(items, language, menu.location)


@router.get("/{lang}")
async def read_home_page(
    session: SessionDep, resolver: ResolverDep, language: PageLanguageDep
) -> Any:
    """Everything the home page renders, in the prefix language."""
    published = {"status": PublishStatus.PUBLISHED}
    return {
        "language": language,
        "site": get_or_create_site_settings(session),
        "navigation": _navigation(session, language),
        "sections": {
            section["section_id"]: section
            for section in await _localized_list(
                session, resolver, ContentType.SECTION, language, limit=500
            )
        },
        "packages": await _localized_list(
            session,
            resolver,
            ContentType.PACKAGE,
            language,
            limit=HOME_LIMIT,
            filters=published,
        ),
        "blogs": await _localized_list(
            session,
            resolver,
            ContentType.BLOG,
            language,
            limit=HOME_LIMIT,
            filters=published,
        ),
        "testimonials": await _localized_list(
            session,
            resolver,
            ContentType.TESTIMONIAL,
            language,
            filters={"status": ReviewStatus.APPROVED},
        ),
        "gallery": await _localized_list(session, resolver, ContentType.GALLERY, language),
    }


@router.get("/{lang}/packages")
async def read_packages_page(
    session: SessionDep, resolver: ResolverDep, language: PageLanguageDep
) -> Any:
    return {
        "language": language,
        "navigation": _navigation(session, language),
        "packages": await _localized_list(
            session,
            resolver,
            ContentType.PACKAGE,
            language,
            filters={"status": PublishStatus.PUBLISHED},
        ),
    }


async def _detail_page(
    session: SessionDep,
    resolver: ResolverDep,
    content_type: ContentType,
    key: str,
    language: str,
) -> dict[str, Any]:
    item = get_content_by_slug_or_id(session=session, content_type=content_type, key=key)
    if getattr(item, "status", None) != PublishStatus.PUBLISHED:
        raise ResourceNotFoundError("Page", key)
    return {
        "language": language,
        "navigation": _navigation(session, language),
        "item": await localize_item(resolver, content_type, item, language),
    }


@router.get("/{lang}/packages/{slug_or_id}")
async def read_package_page(
    slug_or_id: str,
    session: SessionDep,
    resolver: ResolverDep,
    language: PageLanguageDep,
) -> Any:
    return await _detail_page(session, resolver, ContentType.PACKAGE, slug_or_id, language)


@router.get("/{lang}/blog")
async def read_blog_page(
    session: SessionDep, resolver: ResolverDep, language: PageLanguageDep
) -> Any:
    return {
        "language": language,
        "navigation": _navigation(session, language),
        "blogs": await _localized_list(
            session,
            resolver,
            ContentType.BLOG,
            language,
            filters={"status": PublishStatus.PUBLISHED},
        ),
    }


@router.get("/{lang}/blog/{slug_or_id}")
async def read_blog_post_page(
    slug_or_id: str,
    session: SessionDep,
    resolver: ResolverDep,
    language: PageLanguageDep,
) -> Any:
    return await _detail_page(session, resolver, ContentType.BLOG, slug_or_id, language)
