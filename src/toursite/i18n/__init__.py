"""Site internationalization.

Covers locale-prefixed routing (resolver, routing config, middleware) and
the python-i18n catalogs used for API error messages. Content translation
lives in ``toursite.translations``.
"""

from toursite.i18n.config import (
    DEFAULT_LOCALE,
    PRIMARY_LOCALE,
    SECONDARY_LOCALES,
    SUPPORTED_LOCALE_CODES,
    SUPPORTED_LOCALES,
    SupportedLocale,
    is_supported_locale,
    normalize_locale,
)
from toursite.i18n.context import get_locale, reset_locale, set_locale
from toursite.i18n.middleware import LocaleMiddleware
from toursite.i18n.resolver import (
    LocaleResolution,
    parse_accept_language,
    resolve_language,
)
from toursite.i18n.routing import RoutingConfig, RoutingConfigProvider
from toursite.i18n.translator import init_translations, translate

__all__ = [
    "DEFAULT_LOCALE",
    "PRIMARY_LOCALE",
    "SECONDARY_LOCALES",
    "SUPPORTED_LOCALES",
    "SUPPORTED_LOCALE_CODES",
    "LocaleMiddleware",
    "LocaleResolution",
    "RoutingConfig",
    "RoutingConfigProvider",
    "SupportedLocale",
    "get_locale",
    "init_translations",
    "is_supported_locale",
    "normalize_locale",
    "parse_accept_language",
    "reset_locale",
    "resolve_language",
    "set_locale",
    "translate",
]
