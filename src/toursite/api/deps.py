from typing import Annotated

from fastapi import Depends, Query, Request

from toursite.auth.deps import SessionDep
from toursite.core.config import Settings, get_settings
from toursite.core.exceptions import TranslationProviderError
from toursite.core.logging import get_logger
from toursite.i18n.config import PRIMARY_LOCALE, normalize_locale
from toursite.i18n.context import get_locale
from toursite.i18n.routing import RoutingConfigProvider
from toursite.translations.provider import TranslationProvider, get_translation_provider
from toursite.translations.resolver import TranslationResolver

logger = get_logger(__name__)

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_routing_provider(request: Request) -> RoutingConfigProvider:
    return request.app.state.routing_provider


RoutingProviderDep = Annotated[RoutingConfigProvider, Depends(get_routing_provider)]


def get_optional_provider(session: SessionDep) -> TranslationProvider | None:
    """The configured provider, or None so lookups degrade to base content."""
    try:
        return get_translation_provider(session)
    except TranslationProviderError:
        logger.debug("translation_provider_unconfigured")
        return None


ProviderDep = Annotated[TranslationProvider | None, Depends(get_optional_provider)]


def get_resolver(session: SessionDep, provider: ProviderDep) -> TranslationResolver:
    return TranslationResolver(session, provider)


ResolverDep = Annotated[TranslationResolver, Depends(get_resolver)]


def get_request_language(
    lang: Annotated[str | None, Query(description="Language code")] = None,
) -> str:
    """Explicit ``?lang=``, else the language the locale middleware chose."""
    if lang:
        return normalize_locale(lang)
    return get_locale() or PRIMARY_LOCALE


LanguageDep = Annotated[str, Depends(get_request_language)]
