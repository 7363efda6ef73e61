"""Translation coverage reporting for the CMS dashboard."""

from typing import Literal

from sqlmodel import Session, SQLModel

from toursite.content.registry import CONTENT_REGISTRY, ContentSpec, ContentType
from toursite.i18n.config import SECONDARY_LOCALES
from toursite.translations.resolver import is_empty
from toursite.translations.store import list_translations

CoverageStatus = Literal["complete", "partial", "missing"]


class LanguageCoverage(SQLModel):
    exists: bool
    is_auto_translated: bool
    completeness: float
    missing_fields: list[str]


class ItemCoverage(SQLModel):
    content_type: str
    content_id: str
    title: str
    languages: dict[str, LanguageCoverage]
    overall_coverage: float
    missing_languages: list[str]
    status: CoverageStatus


class TypeCoverage(SQLModel):
    content_type: str
    total_items: int
    translated_items: int
    coverage_percentage: float
    items: list[ItemCoverage]


class CoverageSummary(SQLModel):
    total_items: int
    translated_items: int
    coverage_percentage: float
    by_type: list[TypeCoverage]


def _status(coverage: float) -> CoverageStatus:
    if coverage >= 100:
        return "complete"
    if coverage > 0:
        return "partial"
    return "missing"


def check_item_coverage(
    spec: ContentSpec,
    item: SQLModel,
    translations: dict[str, dict],
    auto_flags: dict[str, bool],
) -> ItemCoverage:
    """Completeness of one item's translations.

    Only fields with a non-empty base value count; an item whose base content
    is entirely empty is trivially complete.
    """
    base = spec.base_fields(item)
    expected = [name for name, value in base.items() if not is_empty(value)]

    languages: dict[str, LanguageCoverage] = {}
    for language in SECONDARY_LOCALES:
        fields = translations.get(language)
        if fields is None:
            languages[language] = LanguageCoverage(
                exists=False,
                is_auto_translated=False,
                completeness=0.0 if expected else 100.0,
                missing_fields=list(expected),
            )
            continue
        missing = [name for name in expected if is_empty(fields.get(name))]
        filled = len(expected) - len(missing)
        languages[language] = LanguageCoverage(
            exists=True,
            is_auto_translated=auto_flags.get(language, False),
            completeness=round(filled / len(expected) * 100, 2) if expected else 100.0,
            missing_fields=missing,
        )

    overall = round(
        sum(lang.completeness for lang in languages.values()) / len(languages), 2
    )
    return ItemCoverage(
        content_type=spec.content_type.value,
        content_id=spec.item_id(item),
        title=str(getattr(item, spec.title_field, "") or spec.item_id(item)),
        languages=languages,
        overall_coverage=overall,
        missing_languages=[code for code, lang in languages.items() if not lang.exists],
        status=_status(overall),
    )


def check_type_coverage(*, session: Session, content_type: ContentType) -> TypeCoverage:
    spec = CONTENT_REGISTRY[content_type]
    rows = list_translations(session=session, content_type=content_type.value)

    by_item: dict[str, dict[str, dict]] = {}
    auto_by_item: dict[str, dict[str, bool]] = {}
    for row in rows:
        by_item.setdefault(row.content_id, {})[row.language] = row.fields or {}
        auto_by_item.setdefault(row.content_id, {})[row.language] = row.is_auto_translated

    items = [
        check_item_coverage(
            spec,
            item,
            by_item.get(spec.item_id(item), {}),
            auto_by_item.get(spec.item_id(item), {}),
        )
        for item in spec.iter_items(session)
    ]
    translated = sum(1 for item in items if item.status == "complete")
    return TypeCoverage(
        content_type=content_type.value,
        total_items=len(items),
        translated_items=translated,
        coverage_percentage=round(translated / len(items) * 100, 2) if items else 0.0,
        items=items,
    )


def check_all_coverage(*, session: Session) -> CoverageSummary:
    by_type = [
        check_type_coverage(session=session, content_type=content_type)
        for content_type in CONTENT_REGISTRY
    ]
    total = sum(t.total_items for t in by_type)
    translated = sum(t.translated_items for t in by_type)
    return CoverageSummary(
        total_items=total,
        translated_items=translated,
        coverage_percentage=round(translated / total * 100, 2) if total else 0.0,
        by_type=by_type,
    )
