"""Machine-translation providers.

The resolver only depends on :class:`TranslationProvider`; the DeepL
implementation talks to the REST API over httpx. Tests swap in a fake.
"""

import asyncio
import builtins
from typing import Protocol

import httpx
from sqlmodel import Session

from toursite.core.config import settings
from toursite.core.exceptions import TranslationProviderError
from toursite.core.http import TRANSLATION_TIMEOUT, create_http_client
from toursite.core.logging import get_logger
from toursite.site_settings.service import get_api_key

logger = get_logger(__name__)

DEEPL_FREE_URL = "https://api-free.deepl.com/v2"
DEEPL_PRO_URL = "https://api.deepl.com/v2"

# DeepL wants regional variants for some targets
_DEEPL_TARGET_CODES = {"en": "EN-US", "pt": "PT-PT"}

# DeepL accepts at most 50 texts per request
_DEEPL_BATCH_SIZE = 50


class TranslationProvider(Protocol):
    name: str

    async def translate_texts(
        self, texts: list[str], source: str, target: str
    ) -> list[str]:
        """Translate ``texts`` in one call, preserving order and length."""
        ...


class DeepLProvider:
    name = "DeepL"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (
            base_url
            or settings.DEEPL_API_URL
            or (DEEPL_FREE_URL if api_key.endswith(":fx") else DEEPL_PRO_URL)
        ).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.TRANSLATION_TIMEOUT_SECONDS
        self._client = client

    @staticmethod
    def source_code(language: str) -> str:
        return language.upper()

    @staticmethod
    def target_code(language: str) -> str:
        return _DEEPL_TARGET_CODES.get(language, language.upper())

    async def translate_texts(
        self, texts: list[str], source: str, target: str
    ) -> list[str]:
        if not texts:
            return []

        results: list[str] = []
        for start in range(0, len(texts), _DEEPL_BATCH_SIZE):
            batch = texts[start : start + _DEEPL_BATCH_SIZE]
            results.extend(await self._translate_batch(batch, source, target))
        return results

    async def _translate_batch(
        self, texts: list[str], source: str, target: str
    ) -> list[str]:
        payload = {
            "text": texts,
            "source_lang": self.source_code(source),
            "target_lang": self.target_code(target),
        }
        headers = {"Authorization": f"DeepL-Auth-Key {self.api_key}"}
        url = f"{self.base_url}/translate"

        try:
            if self._client is not None:
                response = await asyncio.wait_for(
                    self._client.post(url, json=payload, headers=headers),
                    timeout=self.timeout_seconds,
                )
            else:
                async with create_http_client(timeout=TRANSLATION_TIMEOUT) as client:
                    response = await asyncio.wait_for(
                        client.post(url, json=payload, headers=headers),
                        timeout=self.timeout_seconds,
                    )
            response.raise_for_status()
            data = response.json()
        except builtins.TimeoutError as e:
            raise TranslationProviderError(
                f"timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise TranslationProviderError(f"HTTP {e.response.status_code}") from e
        except (httpx.RequestError, ValueError) as e:
            raise TranslationProviderError(str(e) or type(e).__name__) from e

        translations = data.get("translations") if isinstance(data, dict) else None
        if not isinstance(translations, list) or len(translations) != len(texts):
            raise TranslationProviderError("unexpected response shape")

        logger.debug(
            "deepl_batch_translated", source=source, target=target, count=len(texts)
        )
        return [str(item.get("text", "")) for item in translations]


def resolve_deepl_key(session: Session | None) -> str | None:
    """API key saved in the CMS first, then the environment."""
    if session is not None:
        stored = get_api_key(session=session, service="deepl")
        if stored:
            return stored
    return settings.DEEPL_API_KEY


def get_translation_provider(session: Session | None = None) -> TranslationProvider:
    """Build the configured provider.

    Raises:
        TranslationProviderError: No API key is configured
    """
    api_key = resolve_deepl_key(session)
    if not api_key:
        raise TranslationProviderError("no API key configured")
    return DeepLProvider(api_key)
