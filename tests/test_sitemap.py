import asyncio
from xml.etree import ElementTree as ET

from fastapi.testclient import TestClient
import pytest
from sqlmodel import Session

from toursite.content.crud import create_content
from toursite.content.models import BlogCreate, PackageCreate, PublishStatus
from toursite.content.registry import ContentType
from toursite.sitemap.service import (
    SITEMAP_NS,
    XHTML_NS,
    SitemapPage,
    collect_pages,
    generate_sitemap,
    get_sitemap_status,
    render_sitemap,
)

SITE = "https://tours.example.com"
NS = {"sm": SITEMAP_NS, "xhtml": XHTML_NS}


@pytest.fixture
def published(session: Session) -> None:
    create_content(
        session=session,
        content_type=ContentType.PACKAGE,
        data=PackageCreate(slug="ijen", title="Kawah Ijen", status=PublishStatus.PUBLISHED),
    )
    create_content(
        session=session,
        content_type=ContentType.PACKAGE,
        data=PackageCreate(slug="draft-tour", title="Draf"),
    )
    create_content(
        session=session,
        content_type=ContentType.BLOG,
        data=BlogCreate(slug="tips", title="Tips", status=PublishStatus.PUBLISHED),
    )


def locs(body: bytes) -> list[str]:
    root = ET.fromstring(body)
    return [el.text or "" for el in root.findall("sm:url/sm:loc", NS)]


def test_collect_pages_lists_published_content_only(
    session: Session, published: None
) -> None:
    paths = [page.path for page in collect_pages(session)]
    assert paths == ["", "/packages", "/packages/ijen", "/blog/tips"]


def test_multi_language_sitemap_lists_every_language() -> None:
    body, count = render_sitemap([SitemapPage(path="/packages")], SITE)

    assert count == 5
    assert locs(body) == [
        f"{SITE}/{lang}/packages" for lang in ("id", "en", "de", "nl", "zh")
    ]
    first = ET.fromstring(body).find("sm:url", NS)
    assert first is not None
    alternates = {
        link.get("hreflang"): link.get("href")
        for link in first.findall("xhtml:link", NS)
    }
    assert alternates["x-default"] == f"{SITE}/id/packages"
    assert alternates["zh"] == f"{SITE}/zh/packages"
    assert len(alternates) == 6


def test_single_language_sitemap_is_unprefixed() -> None:
    body, count = render_sitemap(
        [SitemapPage(path=""), SitemapPage(path="/blog/tips")], SITE, multi_language=False
    )

    assert count == 2
    assert locs(body) == [f"{SITE}/", f"{SITE}/blog/tips"]
    assert b"hreflang" not in body


def test_sitemap_xml_endpoint(client: TestClient, published: None) -> None:
    response = client.get("/sitemap.xml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert f"{SITE}/en/packages/ijen" in locs(response.content)
    assert all("draft-tour" not in loc for loc in locs(response.content))


def test_generate_records_status(session: Session, published: None) -> None:
    assert get_sitemap_status(session=session).total_pages == 0

    status = asyncio.run(generate_sitemap(session=session, notify=False))

    assert status.total_pages == 4 * 5
    assert status.sitemap_url == f"{SITE}/sitemap.xml"
    assert not status.google_pinged
    latest = get_sitemap_status(session=session)
    assert latest.id == status.id
    assert latest.total_pages == 20


def test_generate_endpoint_requires_manage_options(
    editor_client: TestClient,
) -> None:
    assert editor_client.post("/api/sitemap/generate").status_code == 403


def test_generate_endpoint_follows_routing_toggle(
    admin_client: TestClient, published: None
) -> None:
    admin_client.post("/api/settings/routing", json={"enableMultiLanguage": False})

    response = admin_client.post("/api/sitemap/generate", params={"notify": "false"})

    assert response.status_code == 200
    assert response.json()["total_pages"] == 4
    assert admin_client.get("/api/sitemap/status").json()["total_pages"] == 4
