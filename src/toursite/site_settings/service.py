"""Site-wide settings and encrypted third-party API keys."""

from collections.abc import Awaitable, Callable

from sqlmodel import Session

from toursite.core.base_models import utcnow
from toursite.core.exceptions import ExternalServiceError, TimeoutError, ValidationError
from toursite.core.http import PROBE_TIMEOUT, fetch_with_timeout
from toursite.core.logging import get_logger
from toursite.core.security import decrypt_api_key, encrypt_api_key, mask_secret
from toursite.i18n.config import is_supported_locale
from toursite.site_settings.models import (
    SINGLETON_ID,
    ApiKeySettings,
    ApiKeyStatus,
    ApiKeyTestResult,
    SiteSettings,
    SiteSettingsUpdate,
)

logger = get_logger(__name__)

KNOWN_SERVICES = (
    "deepl",
    "google_translate",
    "openai",
    "google_analytics",
    "mapbox",
    "stripe",
    "sendgrid",
    "cloudinary",
)

KEY_CHECK_TIMEOUT_SECONDS = 10.0


def get_or_create_site_settings(session: Session) -> SiteSettings:
    settings = session.get(SiteSettings, SINGLETON_ID)
    if not settings:
        settings = SiteSettings(id=SINGLETON_ID)
        session.add(settings)
        session.commit()
        session.refresh(settings)
    return settings


def update_site_settings(session: Session, data: SiteSettingsUpdate) -> SiteSettings:
    settings = get_or_create_site_settings(session)

    update_data = data.model_dump(exclude_unset=True)
    language = update_data.get("default_language")
    if language is not None and not is_supported_locale(language):
        raise ValidationError(
            f"Unsupported language: {language}", field="default_language"
        )
    for key, value in update_data.items():
        setattr(settings, key, value)

    settings.updated_at = utcnow()
    session.add(settings)
    session.commit()
    session.refresh(settings)
    return settings


def _get_key_row(session: Session) -> ApiKeySettings | None:
    return session.get(ApiKeySettings, SINGLETON_ID)


def get_api_key(*, session: Session, service: str) -> str | None:
    """Decrypted key for ``service``, or None when none is stored."""
    row = _get_key_row(session)
    if row is None:
        return None
    stored = (row.keys or {}).get(service)
    if not isinstance(stored, str) or not stored:
        return None
    return decrypt_api_key(stored)


def list_api_keys(*, session: Session) -> list[ApiKeyStatus]:
    """Configured status of every known service plus any extra stored ones."""
    row = _get_key_row(session)
    stored = dict(row.keys or {}) if row else {}
    services = list(KNOWN_SERVICES) + sorted(set(stored) - set(KNOWN_SERVICES))

    statuses = []
    for service in services:
        value = stored.get(service)
        if isinstance(value, str) and value:
            statuses.append(
                ApiKeyStatus(
                    service=service,
                    is_configured=True,
                    masked_key=mask_secret(decrypt_api_key(value)),
                )
            )
        else:
            statuses.append(ApiKeyStatus(service=service, is_configured=False))
    return statuses


def save_api_keys(*, session: Session, api_keys: dict[str, str]) -> list[ApiKeyStatus]:
    """Encrypt and store keys. A blank value removes that service's key.

    Services not mentioned keep their stored key.
    """
    row = _get_key_row(session) or ApiKeySettings(id=SINGLETON_ID)
    keys = dict(row.keys or {})
    for service, value in api_keys.items():
        service = service.strip()
        if not service:
            continue
        if value and value.strip():
            keys[service] = encrypt_api_key(value.strip())
        else:
            keys.pop(service, None)

    # Reassign so the JSON column is flagged dirty
    row.keys = keys
    row.updated_at = utcnow()
    session.add(row)
    session.commit()
    logger.info("api_keys_saved", services=sorted(keys))
    return list_api_keys(session=session)


async def _reachable(url: str, service: str, **kwargs: object) -> bool:
    try:
        response = await fetch_with_timeout(
            url,
            timeout_seconds=KEY_CHECK_TIMEOUT_SECONDS,
            service_name=service,
            timeout=PROBE_TIMEOUT,
            **kwargs,
        )
    except (TimeoutError, ExternalServiceError):
        return False
    return response.is_success


async def _check_deepl(api_key: str) -> bool:
    host = "api-free.deepl.com" if api_key.endswith(":fx") else "api.deepl.com"
    return await _reachable(
        f"https://{host}/v2/usage",
        "DeepL",
        headers={"Authorization": f"DeepL-Auth-Key {api_key}"},
    )


async def _check_google_translate(api_key: str) -> bool:
    return await _reachable(
        "https://translation.googleapis.com/language/translate/v2/languages",
        "Google Translate",
        params={"key": api_key},
    )


async def _check_openai(api_key: str) -> bool:
    return await _reachable(
        "https://api.openai.com/v1/models",
        "OpenAI",
        headers={"Authorization": f"Bearer {api_key}"},
    )


_REMOTE_CHECKS: dict[str, tuple[Callable[[str], Awaitable[bool]], str]] = {
    "deepl": (_check_deepl, "Invalid DeepL API key or service unavailable"),
    "google_translate": (
        _check_google_translate,
        "Invalid Google Translate API key or service unavailable",
    ),
    "openai": (_check_openai, "Invalid OpenAI API key or service unavailable"),
}

_FORMAT_CHECKS: dict[str, tuple[Callable[[str], bool], str]] = {
    "google_analytics": (
        lambda key: key.startswith(("G-", "UA-")),
        "Invalid Google Analytics ID format",
    ),
    "mapbox": (lambda key: key.startswith("pk."), "Invalid Mapbox API key format"),
    "stripe": (lambda key: key.startswith("sk_"), "Invalid Stripe API key format"),
    "sendgrid": (lambda key: key.startswith("SG."), "Invalid SendGrid API key format"),
    "cloudinary": (lambda key: len(key) > 10, "Invalid Cloudinary API key"),
}


async def check_api_key(*, service: str, api_key: str) -> ApiKeyTestResult:
    """Check a key against its service, or by format where there is no cheap call.

    Raises:
        ValidationError: Unknown service
    """
    if service in _REMOTE_CHECKS:
        check, failure = _REMOTE_CHECKS[service]
        valid = await check(api_key)
    elif service in _FORMAT_CHECKS:
        format_check, failure = _FORMAT_CHECKS[service]
        valid = format_check(api_key)
    else:
        raise ValidationError(f"Unknown service: {service}", field="service")

    logger.info("api_key_tested", service=service, valid=valid)
    return ApiKeyTestResult(
        service=service,
        valid=valid,
        message=f"{service} API key is valid" if valid else failure,
    )
