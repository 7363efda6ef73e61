"""API message catalogs (python-i18n).

Error messages are kept in one flat JSON file per site language under
``translations/``. Page and CMS content is translated by
``toursite.translations``, not here.
"""

from functools import cache
from pathlib import Path

import i18n  # type: ignore[import-untyped]

from toursite.i18n.config import DEFAULT_LOCALE, SUPPORTED_LOCALE_CODES
from toursite.i18n.context import get_locale

TRANSLATIONS_DIR = Path(__file__).parent / "translations"


@cache
def init_translations() -> None:
    """Point python-i18n at our catalogs. Safe to call repeatedly."""
    i18n.set("file_format", "json")
    i18n.set("filename_format", "{locale}.{format}")
    # Flat keys, no top-level locale object in the files
    i18n.set("skip_locale_root_data", True)
    i18n.set("fallback", DEFAULT_LOCALE)
    i18n.set("enable_memoization", True)
    i18n.load_path.append(str(TRANSLATIONS_DIR))


def translate(key: str, locale: str | None = None, **params: str | int | float) -> str:
    """Message for ``key`` in ``locale`` (default: the request locale).

    ``%{name}`` placeholders are filled from ``params``. Unknown keys come
    back unchanged, and locales outside the site languages use the primary
    language.

    Example:
        translate("error_not_found", "en", resource="Package")  # "Package not found"
    """
    init_translations()
    target = locale or get_locale()
    if target not in SUPPORTED_LOCALE_CODES:
        target = DEFAULT_LOCALE
    message: str = i18n.t(key, locale=target, **params)
    return message
