"""Wrong-language heuristics for base and translated content.

A keyword-membership test: common function words of the language the text
should *not* be in are searched for as whole words. It produces false
positives and negatives and is only an advisory signal for operators.
"""

from collections.abc import Iterable, Iterator
import re
from typing import Any

from toursite.i18n.config import PRIMARY_LOCALE

# Common Indonesian words; seeing one in a translation means the source
# text leaked through untranslated.
INDONESIAN_KEYWORDS: frozenset[str] = frozenset(
    {
        "yang", "dan", "dengan", "untuk", "dari", "ini", "itu", "di", "ke",
        "pada", "adalah", "akan", "dapat", "kami", "kita", "saya", "mereka",
        "anda", "tahun", "hari", "bulan", "minggu", "waktu", "tempat",
        "orang", "baik", "besar", "kecil", "banyak", "sedikit", "lebih",
        "kurang", "sudah", "belum", "perusahaan", "pemandu", "wisata",
        "berpengalaman", "pengalaman",
    }
)  # fmt: skip

# English words that should not appear in Indonesian base content
ENGLISH_KEYWORDS: frozenset[str] = frozenset(
    {
        "the", "and", "with", "for", "your", "our", "this", "that", "have",
        "from", "professional", "experience", "service", "quality", "safety",
        "guide", "best", "trusted", "partner", "adventure", "tour", "travel",
    }
)  # fmt: skip

# Keywords that are ordinary words in the expected language
KEYWORD_EXCLUSIONS: dict[str, frozenset[str]] = {
    "nl": frozenset({"dan"}),
}

# Structured fields nest at most this deep (itinerary -> day -> activities)
MAX_DEPTH = 5

_WHITESPACE = re.compile(r"\s+")


def keywords_for(expected_language: str) -> frozenset[str]:
    """Words that must not appear in text expected to be in this language."""
    if expected_language == PRIMARY_LOCALE:
        keywords = ENGLISH_KEYWORDS
    else:
        keywords = INDONESIAN_KEYWORDS
    return keywords - KEYWORD_EXCLUSIONS.get(expected_language, frozenset())


def find_wrong_language_words(text: str | None, expected_language: str) -> list[str]:
    """Return the foreign keywords found in ``text``, sorted."""
    if not text:
        return []
    normalized = f" {_WHITESPACE.sub(' ', text.lower()).strip()} "
    if normalized.isspace():
        return []
    return sorted(kw for kw in keywords_for(expected_language) if f" {kw} " in normalized)


def scan_for_wrong_language(text: str | None, expected_language: str) -> bool:
    """True when ``text`` contains a word from the wrong language.

    Matching is whole-word (bounded by whitespace or the string edges) and
    case-insensitive; one hit is enough.
    """
    return bool(find_wrong_language_words(text, expected_language))


def iter_strings(value: Any, depth: int = 0) -> Iterator[str]:
    """Yield every string leaf of a JSON-like value, depth-first."""
    if depth > MAX_DEPTH:
        return
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_strings(item, depth + 1)
    elif isinstance(value, list | tuple):
        for item in value:
            yield from iter_strings(item, depth + 1)


def scan_fields(
    fields: dict[str, Any],
    expected_language: str,
    only: Iterable[str] | None = None,
) -> list[str]:
    """Names of fields with at least one flagged string, in field order."""
    names = list(only) if only is not None else list(fields)
    return [
        name
        for name in names
        if any(
            scan_for_wrong_language(text, expected_language)
            for text in iter_strings(fields.get(name))
        )
    ]


def looks_untranslated(source: Any, translated: Any, target_language: str) -> list[str]:
    """Validation warnings for one translated field.

    Flags output identical to the source text and output that still
    contains primary-language keywords.
    """
    warnings: list[str] = []
    for original, result in zip(iter_strings(source), iter_strings(translated), strict=False):
        if not original.strip():
            continue
        if original.strip().lower() == result.strip().lower():
            warnings.append("identical_to_source")
            break
    if any(scan_for_wrong_language(text, target_language) for text in iter_strings(translated)):
        warnings.append("contains_source_language")
    return warnings
