import asyncio

from conftest import FailingProvider, FakeProvider
import pytest
from sqlmodel import Session

from toursite.content.crud import create_content
from toursite.content.models import Package, PackageCreate, PublishStatus
from toursite.content.registry import ContentType
from toursite.core.exceptions import ResourceNotFoundError, ValidationError
from toursite.translations.resolver import (
    TranslationResolver,
    collect_texts,
    is_empty,
    substitute_texts,
)
from toursite.translations.store import get_translation, upsert_translation


@pytest.fixture
def package(session: Session) -> Package:
    return create_content(
        session=session,
        content_type=ContentType.PACKAGE,
        data=PackageCreate(
            slug="nusa-penida",
            title="Tur Nusa Penida",
            description="Perjalanan sehari ke pulau",
            price=750000,
            highlights=["Pantai Kelingking", "Snorkeling"],
            itinerary=[
                {"day": "Hari 1", "image": "/uploads/day1.jpg", "activities": ["Berangkat"]}
            ],
            status=PublishStatus.PUBLISHED,
        ),
    )


def resolve(resolver: TranslationResolver, package: Package, language: str, **kwargs):
    return asyncio.run(
        resolver.get_translated_content(
            ContentType.PACKAGE, str(package.id), language, **kwargs
        )
    )


def test_is_empty() -> None:
    assert is_empty(None)
    assert is_empty("  ")
    assert is_empty([])
    assert is_empty({})
    assert not is_empty(0)
    assert not is_empty("x")


def test_collect_and_substitute_skip_identifiers_and_urls() -> None:
    value = [
        {"day": "Hari 1", "image": "/uploads/a.jpg", "link": "https://x.test"},
        "https://example.com",
        "Makan siang",
    ]
    assert list(collect_texts(value)) == ["Hari 1", "Makan siang"]

    rebuilt = substitute_texts(value, iter(["Day 1", "Lunch"]))
    assert rebuilt == [
        {"day": "Day 1", "image": "/uploads/a.jpg", "link": "https://x.test"},
        "https://example.com",
        "Lunch",
    ]


def test_primary_language_returns_base(session: Session, package: Package) -> None:
    provider = FakeProvider()
    result = resolve(TranslationResolver(session, provider), package, "id")

    assert result.source == "base"
    assert result.fields["title"] == "Tur Nusa Penida"
    assert provider.calls == []


def test_unsupported_language_falls_back_to_primary(
    session: Session, package: Package
) -> None:
    result = resolve(TranslationResolver(session, FakeProvider()), package, "fr")
    assert result.language == "id"
    assert result.source == "base"


def test_missing_translation_is_generated_and_stored(
    session: Session, package: Package
) -> None:
    provider = FakeProvider({"Tur Nusa Penida": "Nusa Penida Tour"})
    result = resolve(TranslationResolver(session, provider), package, "en")

    assert result.source == "machine-translation"
    assert not result.degraded
    assert result.fields["title"] == "Nusa Penida Tour"
    assert result.fields["highlights"] == ["[en] Pantai Kelingking", "[en] Snorkeling"]
    assert result.fields["itinerary"][0]["image"] == "/uploads/day1.jpg"
    assert result.fields["itinerary"][0]["day"] == "[en] Hari 1"
    # Empty base fields are not sent
    assert result.fields["long_description"] is None
    assert all(target == "en" for _, _, target in provider.calls)

    stored = get_translation(
        session=session,
        content_type="package",
        content_id=str(package.id),
        language="en",
    )
    assert stored is not None
    assert stored.is_auto_translated
    assert stored.fields["title"] == "Nusa Penida Tour"


def test_second_lookup_is_served_from_store(session: Session, package: Package) -> None:
    provider = FakeProvider()
    resolver = TranslationResolver(session, provider)
    first = resolve(resolver, package, "de")
    calls = len(provider.calls)

    second = resolve(resolver, package, "de")

    assert second.source == "stored-translation"
    assert second.fields == first.fields
    assert len(provider.calls) == calls


def test_incomplete_translation_fills_only_missing_fields(
    session: Session, package: Package
) -> None:
    upsert_translation(
        session=session,
        content_type="package",
        content_id=str(package.id),
        language="nl",
        fields={"title": "Handmatige titel", "description": ""},
        is_auto_translated=False,
    )
    provider = FakeProvider()
    result = resolve(TranslationResolver(session, provider), package, "nl")

    assert result.source == "machine-translation"
    assert result.fields["title"] == "Handmatige titel"
    assert result.fields["description"] == "[nl] Perjalanan sehari ke pulau"
    sent = [text for texts, _, _ in provider.calls for text in texts]
    assert "Tur Nusa Penida" not in sent


def test_force_retranslates_everything(session: Session, package: Package) -> None:
    upsert_translation(
        session=session,
        content_type="package",
        content_id=str(package.id),
        language="en",
        fields={"title": "Old title"},
    )
    resolver = TranslationResolver(session, FakeProvider())
    partial = resolve(resolver, package, "en")
    assert partial.fields["title"] == "Old title"

    forced = resolve(resolver, package, "en", force=True)
    assert forced.source == "machine-translation"
    assert forced.fields["title"] == "[en] Tur Nusa Penida"


def test_provider_failure_degrades_to_base_without_writing(
    session: Session, package: Package
) -> None:
    provider = FailingProvider()
    result = resolve(TranslationResolver(session, provider), package, "zh")

    assert result.degraded
    assert result.source == "base"
    assert result.fields["title"] == "Tur Nusa Penida"
    assert provider.calls == 1
    assert (
        get_translation(
            session=session,
            content_type="package",
            content_id=str(package.id),
            language="zh",
        )
        is None
    )


def test_transport_errors_also_degrade(session: Session, package: Package) -> None:
    provider = FailingProvider(ConnectionError("connection reset"))
    result = resolve(TranslationResolver(session, provider), package, "de")
    assert result.degraded


def test_no_provider_degrades(session: Session, package: Package) -> None:
    result = resolve(TranslationResolver(session, None), package, "en")
    assert result.degraded
    assert result.source == "base"


def test_unknown_item_and_type(session: Session) -> None:
    resolver = TranslationResolver(session, FakeProvider())
    with pytest.raises(ResourceNotFoundError):
        asyncio.run(
            resolver.get_translated_content(
                "package", "00000000-0000-0000-0000-000000000000", "en"
            )
        )
    with pytest.raises(ResourceNotFoundError):
        asyncio.run(resolver.get_translated_content("package", "not-a-uuid", "en"))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.get_translated_content("banner", "x", "en"))


def test_translate_all_languages(session: Session, package: Package) -> None:
    resolver = TranslationResolver(session, FakeProvider())
    outcomes = asyncio.run(
        resolver.translate_all_languages(ContentType.PACKAGE, str(package.id))
    )
    assert [o.language for o in outcomes] == ["en", "de", "nl", "zh"]
    assert all(o.source == "machine-translation" for o in outcomes)


def test_upsert_overwrites_and_advances_updated_at(
    session: Session, package: Package
) -> None:
    key = {"content_type": "package", "content_id": str(package.id), "language": "en"}
    first = upsert_translation(session=session, fields={"title": "A"}, **key)
    first_updated = first.updated_at
    second = upsert_translation(
        session=session, fields={"title": "B"}, is_auto_translated=False, **key
    )

    assert second.id == first.id
    assert second.fields == {"title": "B"}
    assert not second.is_auto_translated
    assert second.updated_at > first_updated
