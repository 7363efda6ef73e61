"""Localized content lookup with on-demand machine translation.

``TranslationResolver.get_translated_content`` answers "give me this item in
language L": base content for the primary language, a complete stored
translation when one exists, and otherwise a fresh machine translation that
is written back to the store. A provider failure degrades to base content
and writes nothing.

There is no locking around generation. Two concurrent requests for the same
(item, language) may both call the provider; the later upsert wins.
"""

import asyncio
import builtins
from collections.abc import Iterator
from typing import Any

from sqlmodel import Session

from toursite.content.registry import ContentSpec, ContentType, get_content_spec
from toursite.core.config import settings
from toursite.core.exceptions import ResourceNotFoundError, TranslationProviderError
from toursite.core.logging import get_logger
from toursite.i18n.config import (
    PRIMARY_LOCALE,
    SECONDARY_LOCALES,
    SUPPORTED_LOCALE_CODES,
)
from toursite.translations.detector import MAX_DEPTH, looks_untranslated
from toursite.translations.models import LanguageOutcome, TranslatedContent
from toursite.translations.provider import TranslationProvider
from toursite.translations.store import get_translation, upsert_translation

logger = get_logger(__name__)

# Keys inside structured fields whose values are identifiers, not prose
NON_TRANSLATABLE_KEYS = frozenset(
    {
        "id",
        "url",
        "href",
        "link",
        "slug",
        "icon",
        "image",
        "image_url",
        "imageUrl",
        "avatar",
        "email",
        "phone",
        "price",
        "value",
    }
)

_URL_PREFIXES = ("http://", "https://", "/", "#", "mailto:", "tel:")


def is_empty(value: Any) -> bool:
    """Empty strings, whitespace, None and empty containers count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list | tuple | dict):
        return len(value) == 0
    return False


def _is_prose(text: str) -> bool:
    stripped = text.strip()
    return bool(stripped) and not stripped.startswith(_URL_PREFIXES)


def collect_texts(value: Any, depth: int = 0) -> Iterator[str]:
    """Yield the strings of a field that should be sent for translation."""
    if depth > MAX_DEPTH:
        return
    if isinstance(value, str):
        if _is_prose(value):
            yield value
    elif isinstance(value, dict):
        for key, item in value.items():
            if key not in NON_TRANSLATABLE_KEYS:
                yield from collect_texts(item, depth + 1)
    elif isinstance(value, list | tuple):
        for item in value:
            yield from collect_texts(item, depth + 1)


def substitute_texts(value: Any, replacements: Iterator[str], depth: int = 0) -> Any:
    """Rebuild ``value`` taking strings from ``replacements`` in collect order."""
    if depth > MAX_DEPTH:
        return value
    if isinstance(value, str):
        return next(replacements) if _is_prose(value) else value
    if isinstance(value, dict):
        return {
            key: item
            if key in NON_TRANSLATABLE_KEYS
            else substitute_texts(item, replacements, depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [substitute_texts(item, replacements, depth + 1) for item in value]
    return value


class TranslationResolver:
    """Resolve content items into a target language.

    Args:
        session: Database session used for base content and the store
        provider: Machine-translation provider, or None when none is
            configured (missing translations then degrade to base content)
        timeout_seconds: Upper bound for one provider call
    """

    def __init__(
        self,
        session: Session,
        provider: TranslationProvider | None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.session = session
        self.provider = provider
        self.timeout_seconds = timeout_seconds or settings.TRANSLATION_TIMEOUT_SECONDS

    async def get_translated_content(
        self,
        content_type: str | ContentType,
        content_id: str,
        language: str,
        force: bool = False,
    ) -> TranslatedContent:
        """Return the item's translatable fields in ``language``.

        Raises:
            ValidationError: Unknown content type
            ResourceNotFoundError: No such item
        """
        spec = get_content_spec(content_type)
        item = spec.get(self.session, content_id)
        if item is None:
            raise ResourceNotFoundError(spec.label, content_id)

        content_id = spec.item_id(item)
        base = spec.base_fields(item)
        if language not in SUPPORTED_LOCALE_CODES:
            language = PRIMARY_LOCALE

        if language == PRIMARY_LOCALE:
            return self._result(spec, content_id, language, base, "base")

        expected = [name for name, value in base.items() if not is_empty(value)]
        stored = (
            None
            if force
            else get_translation(
                session=self.session,
                content_type=spec.content_type.value,
                content_id=content_id,
                language=language,
            )
        )
        stored_fields: dict[str, Any] = dict(stored.fields) if stored else {}

        missing = [name for name in expected if is_empty(stored_fields.get(name))]
        if stored is not None and not missing:
            fields = {name: stored_fields.get(name, base[name]) for name in base}
            return self._result(spec, content_id, language, fields, "stored-translation")

        try:
            translated = await self._translate_fields(
                {name: base[name] for name in missing}, language
            )
        except TranslationProviderError as e:
            logger.warning(
                "translation_provider_failed",
                content_type=spec.content_type.value,
                content_id=content_id,
                language=language,
                error=e.message,
            )
            return self._result(spec, content_id, language, base, "base", degraded=True)

        warnings: list[str] = []
        for name, value in translated.items():
            for warning in looks_untranslated(base[name], value, language):
                warnings.append(f"{name}:{warning}")
        if warnings:
            logger.warning(
                "translation_validation_warning",
                content_type=spec.content_type.value,
                content_id=content_id,
                language=language,
                warnings=warnings,
            )

        fields = {}
        for name in base:
            if name in translated:
                fields[name] = translated[name]
            elif name in expected:
                fields[name] = stored_fields[name]
            else:
                fields[name] = base[name]

        upsert_translation(
            session=self.session,
            content_type=spec.content_type.value,
            content_id=content_id,
            language=language,
            fields=fields,
            is_auto_translated=True,
        )
        logger.info(
            "translation_stored",
            content_type=spec.content_type.value,
            content_id=content_id,
            language=language,
            translated_fields=sorted(translated),
            force=force,
        )
        result = self._result(spec, content_id, language, fields, "machine-translation")
        result.warnings = warnings
        return result

    async def translate_all_languages(
        self,
        content_type: str | ContentType,
        content_id: str,
        force: bool = False,
        languages: list[str] | None = None,
    ) -> list[LanguageOutcome]:
        """Resolve the item for every secondary language, one after another."""
        outcomes: list[LanguageOutcome] = []
        for language in languages or list(SECONDARY_LOCALES):
            result = await self.get_translated_content(
                content_type, content_id, language, force=force
            )
            outcomes.append(
                LanguageOutcome(
                    language=result.language,
                    source=result.source,
                    degraded=result.degraded,
                    warnings=result.warnings,
                )
            )
        return outcomes

    async def translate_value(self, value: Any, language: str) -> Any:
        """Translate one free-standing value (a string or JSON structure).

        Raises:
            TranslationProviderError: The provider failed or is missing
        """
        translated = await self._translate_fields({"value": value}, language)
        return translated["value"]

    async def _translate_fields(
        self, fields: dict[str, Any], language: str
    ) -> dict[str, Any]:
        """One provider call per field; all strings of a field go in one batch."""
        if self.provider is None:
            raise TranslationProviderError("no translation provider configured")

        translated: dict[str, Any] = {}
        for name, value in fields.items():
            texts = list(collect_texts(value))
            if not texts:
                translated[name] = value
                continue
            try:
                results = await asyncio.wait_for(
                    self.provider.translate_texts(texts, PRIMARY_LOCALE, language),
                    timeout=self.timeout_seconds,
                )
            except builtins.TimeoutError as e:
                raise TranslationProviderError(
                    f"timed out after {self.timeout_seconds}s"
                ) from e
            except TranslationProviderError:
                raise
            except Exception as e:
                # Provider implementations may leak transport errors
                raise TranslationProviderError(str(e) or type(e).__name__) from e
            if len(results) != len(texts):
                raise TranslationProviderError("provider returned a different number of texts")
            translated[name] = substitute_texts(value, iter(results))
        return translated

    @staticmethod
    def _result(
        spec: ContentSpec,
        content_id: str,
        language: str,
        fields: dict[str, Any],
        source: str,
        degraded: bool = False,
    ) -> TranslatedContent:
        return TranslatedContent(
            content_type=spec.content_type.value,
            content_id=content_id,
            language=language,
            fields=fields,
            source=source,  # type: ignore[arg-type]
            degraded=degraded,
        )
