from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from toursite.api.deps import RoutingProviderDep
from toursite.auth import SessionDep, require_capability
from toursite.auth.roles import Capability
from toursite.sitemap import (
    SitemapStatus,
    build_sitemap,
    generate_sitemap,
    get_sitemap_status,
)

router = APIRouter(prefix="/sitemap", tags=["sitemap"])

CanManageOptions = [Depends(require_capability(Capability.MANAGE_OPTIONS))]


@router.post("/generate", response_model=SitemapStatus, dependencies=CanManageOptions)
async def generate_sitemap_endpoint(
    session: SessionDep, routing: RoutingProviderDep, notify: bool | None = None
) -> Any:
    """Rebuild the sitemap and ping search engines unless ``notify=false``."""
    return await generate_sitemap(
        session=session,
        multi_language=routing.get().enable_multi_language,
        notify=notify,
    )


@router.get("/status", response_model=SitemapStatus, dependencies=CanManageOptions)
def read_sitemap_status(session: SessionDep) -> Any:
    return get_sitemap_status(session=session)


public_router = APIRouter(tags=["sitemap"])


@public_router.get("/sitemap.xml", include_in_schema=False)
def read_sitemap_xml(session: SessionDep, routing: RoutingProviderDep) -> Response:
    body, _ = build_sitemap(session, routing.get().enable_multi_language)
    return Response(content=body, media_type="application/xml")
