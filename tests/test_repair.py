import asyncio

from conftest import FailingProvider, FakeProvider
import pytest
from sqlmodel import Session

from toursite.content.crud import create_content
from toursite.content.models import Blog, BlogCreate
from toursite.content.registry import ContentType
from toursite.translations.coverage import check_all_coverage, check_type_coverage
from toursite.translations.repair import (
    RepairMode,
    fix_source_content,
    repair_translations,
    scan_source_content,
    scan_translations,
)
from toursite.translations.store import get_translation, upsert_translation

ENGLISH = {
    "Jelajah Ubud": "Exploring Ubud",
    "Sawah dan pura": "Rice terraces and temples",
}


@pytest.fixture
def blog(session: Session) -> Blog:
    return create_content(
        session=session,
        content_type=ContentType.BLOG,
        data=BlogCreate(slug="jelajah-ubud", title="Jelajah Ubud", excerpt="Sawah dan pura"),
    )


def store(session: Session, blog: Blog, language: str, **fields: str) -> None:
    upsert_translation(
        session=session,
        content_type="blog",
        content_id=str(blog.id),
        language=language,
        fields=fields,
    )


def test_scan_flags_only_leaked_translations(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")
    store(session, blog, "de", title="Ubud erkunden", excerpt="Reisfelder und Tempel")

    scanned, corrupted = scan_translations(session=session)

    assert scanned == 2
    assert len(corrupted) == 1
    assert corrupted[0].language == "en"
    assert corrupted[0].flagged_fields == ["excerpt"]


def test_scan_filters_by_type_and_language(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")

    assert scan_translations(session=session, languages=["de"]) == (0, [])
    assert scan_translations(session=session, content_types=["package"]) == (0, [])


def test_report_mode_changes_nothing(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")

    report = asyncio.run(
        repair_translations(session=session, provider=None, mode=RepairMode.REPORT)
    )

    assert report.scanned == 1
    assert len(report.corrupted) == 1
    assert report.repaired == 0
    assert get_translation(
        session=session, content_type="blog", content_id=str(blog.id), language="en"
    )


def test_delete_mode_removes_flagged_rows(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")

    report = asyncio.run(
        repair_translations(session=session, provider=None, mode=RepairMode.DELETE)
    )

    assert report.repaired == 1
    assert (
        get_translation(
            session=session, content_type="blog", content_id=str(blog.id), language="en"
        )
        is None
    )


def test_retranslate_mode_replaces_flagged_rows(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")

    report = asyncio.run(
        repair_translations(
            session=session,
            provider=FakeProvider(ENGLISH),
            mode=RepairMode.RETRANSLATE,
            delay_seconds=0,
        )
    )

    assert report.repaired == 1
    assert report.failed == 0
    row = get_translation(
        session=session, content_type="blog", content_id=str(blog.id), language="en"
    )
    assert row is not None
    assert row.fields["excerpt"] == "Rice terraces and temples"
    assert scan_translations(session=session)[1] == []


def test_retranslate_failure_keeps_old_row(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Sawah dan pura")

    report = asyncio.run(
        repair_translations(
            session=session,
            provider=FailingProvider(),
            mode=RepairMode.RETRANSLATE,
            delay_seconds=0,
        )
    )

    assert report.failed == 1
    row = get_translation(
        session=session, content_type="blog", content_id=str(blog.id), language="en"
    )
    assert row is not None
    assert row.fields["excerpt"] == "Sawah dan pura"


def test_source_scan_and_fix(session: Session) -> None:
    post = create_content(
        session=session,
        content_type=ContentType.BLOG,
        data=BlogCreate(
            slug="guide",
            title="Pemandu terbaik",
            excerpt="Your trusted partner",
            tags=["alam", "the best view"],
        ),
    )

    scanned, findings = scan_source_content(session=session)
    assert scanned == 1
    assert {(f.field, tuple(f.words)) for f in findings} == {
        ("excerpt", ("partner", "trusted", "your")),
        ("tags", ("best", "the")),
    }

    provider = FakeProvider(
        {"Your trusted partner": "Mitra terpercaya", "the best view": "pemandangan terbaik"}
    )
    report = asyncio.run(
        fix_source_content(session=session, provider=provider, delay_seconds=0)
    )

    assert report.fixed_fields == 2
    session.refresh(post)
    assert post.excerpt == "Mitra terpercaya"
    assert post.tags == ["alam", "pemandangan terbaik"]
    assert post.title == "Pemandu terbaik"
    assert scan_source_content(session=session)[1] == []


def test_coverage_counts_non_empty_base_fields(session: Session, blog: Blog) -> None:
    store(session, blog, "en", title="Exploring Ubud", excerpt="Rice terraces")
    store(session, blog, "de", title="Ubud erkunden")

    coverage = check_type_coverage(session=session, content_type=ContentType.BLOG)

    assert coverage.total_items == 1
    assert coverage.translated_items == 0
    item = coverage.items[0]
    # Only title and excerpt have base values
    assert item.languages["en"].completeness == 100.0
    assert item.languages["de"].completeness == 50.0
    assert item.languages["de"].missing_fields == ["excerpt"]
    assert item.languages["nl"].exists is False
    assert item.missing_languages == ["nl", "zh"]
    assert item.overall_coverage == 37.5
    assert item.status == "partial"


def test_complete_coverage(session: Session, blog: Blog) -> None:
    for language in ("en", "de", "nl", "zh"):
        store(session, blog, language, title="T", excerpt="E")

    summary = check_all_coverage(session=session)

    assert summary.total_items == 1
    assert summary.translated_items == 1
    assert summary.coverage_percentage == 100.0
