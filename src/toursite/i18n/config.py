"""Supported site languages.

Indonesian is the primary language: base content is authored in it and
every other language is a translation target.
"""

from typing import NamedTuple


class SupportedLocale(NamedTuple):
    """A supported locale with its metadata."""

    code: str
    name: str
    native_name: str


SUPPORTED_LOCALES: tuple[SupportedLocale, ...] = (
    SupportedLocale("id", "Indonesian", "Bahasa Indonesia"),
    SupportedLocale("en", "English", "English"),
    SupportedLocale("de", "German", "Deutsch"),
    SupportedLocale("nl", "Dutch", "Nederlands"),
    SupportedLocale("zh", "Chinese", "中文"),
)

# Set of valid locale codes for fast lookup
SUPPORTED_LOCALE_CODES: frozenset[str] = frozenset(
    loc.code for loc in SUPPORTED_LOCALES
)

PRIMARY_LOCALE = "id"

# Default locale when none specified
DEFAULT_LOCALE = PRIMARY_LOCALE

# Translation targets, in display order
SECONDARY_LOCALES: tuple[str, ...] = tuple(
    loc.code for loc in SUPPORTED_LOCALES if loc.code != PRIMARY_LOCALE
)


def is_supported_locale(code: str) -> bool:
    """Check if a locale code is supported."""
    return code in SUPPORTED_LOCALE_CODES


def normalize_locale(code: str | None) -> str:
    """Normalize a locale code to a supported code.

    Handles cases like:
    - "en-US" -> "en"
    - "zh-CN" -> "zh"
    - "NL" -> "nl"

    Returns DEFAULT_LOCALE if no match found.
    """
    if not code:
        return DEFAULT_LOCALE

    code = code.strip().lower()
    if code in SUPPORTED_LOCALE_CODES:
        return code

    base = code.replace("_", "-").split("-")[0]
    if base in SUPPORTED_LOCALE_CODES:
        return base

    return DEFAULT_LOCALE
