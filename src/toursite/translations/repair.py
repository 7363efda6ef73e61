"""Out-of-band scanning and repair of wrong-language content.

Operators run these from the CLI (``toursite.scripts.repair_translations``,
``toursite.scripts.check_source_content``) or through the CMS endpoints.
Findings are heuristic; see :mod:`toursite.translations.detector`.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlmodel import Session

from toursite.content.registry import CONTENT_REGISTRY, ContentType
from toursite.core.base_models import utcnow
from toursite.core.config import settings
from toursite.core.exceptions import TranslationProviderError
from toursite.core.logging import get_logger
from toursite.i18n.config import PRIMARY_LOCALE, SECONDARY_LOCALES
from toursite.translations.detector import (
    find_wrong_language_words,
    iter_strings,
    scan_fields,
)
from toursite.translations.models import CorruptedTranslation, RepairReport
from toursite.translations.provider import TranslationProvider
from toursite.translations.resolver import TranslationResolver
from toursite.translations.store import (
    delete_translation,
    get_translation,
    list_translations,
)

logger = get_logger(__name__)


class RepairMode(str, Enum):
    REPORT = "report"
    DELETE = "delete"
    RETRANSLATE = "retranslate"


@dataclass
class SourceFinding:
    content_type: str
    content_id: str
    field: str
    words: list[str]
    preview: str


@dataclass
class SourceFixReport:
    scanned: int = 0
    findings: list[SourceFinding] = field(default_factory=list)
    fixed_fields: int = 0
    failed_fields: int = 0


def _content_types(content_types: Iterable[ContentType | str] | None) -> list[ContentType]:
    if not content_types:
        return list(CONTENT_REGISTRY)
    return [ContentType(ct) for ct in content_types]


def _languages(languages: Iterable[str] | None) -> list[str]:
    if not languages:
        return list(SECONDARY_LOCALES)
    return [lang for lang in languages if lang in SECONDARY_LOCALES]


def scan_translations(
    *,
    session: Session,
    content_types: Iterable[ContentType | str] | None = None,
    languages: Iterable[str] | None = None,
) -> tuple[int, list[CorruptedTranslation]]:
    """Check the stored translation of every item in every secondary language.

    Returns:
        Tuple of (number of translations scanned, flagged translations)
    """
    targets = _languages(languages)
    scanned = 0
    corrupted: list[CorruptedTranslation] = []

    for content_type in _content_types(content_types):
        spec = CONTENT_REGISTRY[content_type]
        rows = {
            (row.content_id, row.language): row
            for row in list_translations(session=session, content_type=content_type.value)
        }
        for item in spec.iter_items(session):
            item_id = spec.item_id(item)
            for language in targets:
                row = rows.get((item_id, language))
                if row is None:
                    continue
                scanned += 1
                flagged = scan_fields(row.fields or {}, language)
                if flagged:
                    corrupted.append(
                        CorruptedTranslation(
                            content_type=content_type.value,
                            content_id=item_id,
                            language=language,
                            flagged_fields=flagged,
                            translation_id=row.id,
                        )
                    )

    logger.info("translation_scan_completed", scanned=scanned, corrupted=len(corrupted))
    return scanned, corrupted


async def repair_translations(
    *,
    session: Session,
    provider: TranslationProvider | None,
    mode: RepairMode = RepairMode.REPORT,
    content_types: Iterable[ContentType | str] | None = None,
    languages: Iterable[str] | None = None,
    delay_seconds: float | None = None,
) -> RepairReport:
    """Scan, then delete or re-translate every flagged translation.

    ``retranslate`` forces the resolver for each flagged row and waits
    ``delay_seconds`` between provider calls. A re-translation that degrades
    (provider failure) counts as failed and leaves the old row in place.
    """
    delay = settings.REPAIR_DELAY_SECONDS if delay_seconds is None else delay_seconds
    scanned, corrupted = scan_translations(
        session=session, content_types=content_types, languages=languages
    )
    report = RepairReport(mode=mode.value, scanned=scanned, corrupted=corrupted)
    if mode is RepairMode.REPORT:
        return report

    resolver = TranslationResolver(session, provider)
    for index, finding in enumerate(corrupted):
        if mode is RepairMode.DELETE:
            row = get_translation(
                session=session,
                content_type=finding.content_type,
                content_id=finding.content_id,
                language=finding.language,
            )
            if row is not None:
                delete_translation(session=session, translation=row)
                report.repaired += 1
                logger.info(
                    "corrupted_translation_deleted",
                    content_type=finding.content_type,
                    content_id=finding.content_id,
                    language=finding.language,
                )
            continue

        if index > 0 and delay > 0:
            await asyncio.sleep(delay)
        result = await resolver.get_translated_content(
            finding.content_type, finding.content_id, finding.language, force=True
        )
        if result.degraded:
            report.failed += 1
        else:
            report.repaired += 1

    logger.info(
        "translation_repair_completed",
        mode=mode.value,
        scanned=report.scanned,
        corrupted=len(report.corrupted),
        repaired=report.repaired,
        failed=report.failed,
    )
    return report


def scan_source_content(
    *,
    session: Session,
    content_types: Iterable[ContentType | str] | None = None,
) -> tuple[int, list[SourceFinding]]:
    """Flag base-language fields that contain English words."""
    scanned = 0
    findings: list[SourceFinding] = []
    for content_type in _content_types(content_types):
        spec = CONTENT_REGISTRY[content_type]
        for item in spec.iter_items(session):
            scanned += 1
            for name, value in spec.base_fields(item).items():
                words = sorted(
                    {
                        word
                        for text in iter_strings(value)
                        for word in find_wrong_language_words(text, PRIMARY_LOCALE)
                    }
                )
                if words:
                    preview = next(
                        (
                            text
                            for text in iter_strings(value)
                            if find_wrong_language_words(text, PRIMARY_LOCALE)
                        ),
                        "",
                    )
                    findings.append(
                        SourceFinding(
                            content_type=content_type.value,
                            content_id=spec.item_id(item),
                            field=name,
                            words=words,
                            preview=preview[:80],
                        )
                    )
    return scanned, findings


def _replace_flagged(value: Any, replacements: dict[str, str]) -> Any:
    if isinstance(value, str):
        return replacements.get(value, value)
    if isinstance(value, dict):
        return {key: _replace_flagged(item, replacements) for key, item in value.items()}
    if isinstance(value, list):
        return [_replace_flagged(item, replacements) for item in value]
    return value


async def fix_source_content(
    *,
    session: Session,
    provider: TranslationProvider,
    content_types: Iterable[ContentType | str] | None = None,
    delay_seconds: float | None = None,
) -> SourceFixReport:
    """Translate English strings found in base content back to the primary language.

    Only the flagged strings are sent; the rest of each field is untouched.
    A failed field keeps its original value.
    """
    delay = settings.REPAIR_DELAY_SECONDS if delay_seconds is None else delay_seconds
    scanned, findings = scan_source_content(session=session, content_types=content_types)
    report = SourceFixReport(scanned=scanned, findings=findings)

    for index, finding in enumerate(findings):
        spec = CONTENT_REGISTRY[ContentType(finding.content_type)]
        item = spec.get(session, finding.content_id)
        if item is None:
            continue
        value = getattr(item, finding.field)
        texts = [
            text
            for text in iter_strings(value)
            if find_wrong_language_words(text, PRIMARY_LOCALE)
        ]
        if index > 0 and delay > 0:
            await asyncio.sleep(delay)
        try:
            results = await provider.translate_texts(texts, "en", PRIMARY_LOCALE)
        except TranslationProviderError as e:
            report.failed_fields += 1
            logger.warning(
                "source_fix_failed",
                content_type=finding.content_type,
                content_id=finding.content_id,
                field=finding.field,
                error=e.message,
            )
            continue

        setattr(item, finding.field, _replace_flagged(value, dict(zip(texts, results, strict=True))))
        item.updated_at = utcnow()  # type: ignore[attr-defined]
        session.add(item)
        session.commit()
        report.fixed_fields += 1
        logger.info(
            "source_field_fixed",
            content_type=finding.content_type,
            content_id=finding.content_id,
            field=finding.field,
        )

    return report
