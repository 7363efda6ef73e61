"""Map an inbound request path to a site language.

Pure functions, no I/O: the routing toggle is passed in, and the caller
(the locale middleware) decides how to apply the result.
"""

from dataclasses import dataclass
import re

from toursite.i18n.config import PRIMARY_LOCALE, SUPPORTED_LOCALE_CODES
from toursite.i18n.routing import RoutingConfig

# Paths served without a language prefix. Matched as whole path segments,
# so "/api" covers "/api/packages" but not "/apiary".
EXEMPT_PREFIXES: tuple[str, ...] = (
    "/api",
    "/static",
    "/uploads",
    "/backups",
    "/assets",
    "/admin",
    "/cms",
    "/auth",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
    "/favicon.ico",
    "/robots.txt",
    "/sitemap.xml",
)

_LANGUAGE_TAG = re.compile(r"^(\*|[a-z]{1,8}(-[a-z0-9]{1,8})*)$")
_QUALITY = re.compile(r"^q=(0(\.\d{0,3})?|1(\.0{0,3})?)$")


@dataclass(frozen=True)
class LocaleResolution:
    """Outcome of resolving a request path.

    ``redirect`` is set when the client must be sent elsewhere; otherwise
    ``path`` is what the application should route (possibly rewritten).
    """

    language: str
    path: str
    redirect: str | None = None
    exempt: bool = False


def is_exempt_path(path: str) -> bool:
    return any(
        path == prefix or path.startswith(prefix + "/") for prefix in EXEMPT_PREFIXES
    )


def split_language_prefix(path: str) -> tuple[str | None, str]:
    """Split ``/en/packages`` into ``("en", "/packages")``.

    Returns ``(None, path)`` when the first segment is not a supported code.
    """
    segment, _, rest = path.lstrip("/").partition("/")
    if segment in SUPPORTED_LOCALE_CODES:
        return segment, "/" + rest if rest else "/"
    return None, path


def parse_accept_language(header: str | None) -> list[str]:
    """Return supported language codes from an Accept-Language header.

    Entries keep header order; the primary subtag of each tag is matched
    case-insensitively against the supported codes. Malformed entries and
    entries with ``q=0`` are skipped, so garbage input yields an empty list.

    Handles formats like:
    - "de,en;q=0.5"
    - "en-US,en;q=0.9,id;q=0.8"
    - "zh-CN"
    """
    if not header:
        return []

    found: list[str] = []
    for raw_part in header.split(","):
        tag, *params = (p.strip() for p in raw_part.split(";"))
        tag = tag.lower()
        if not tag or not _LANGUAGE_TAG.match(tag):
            continue

        rejected = False
        for param in params:
            param = param.replace(" ", "").lower()
            if not param.startswith("q="):
                continue
            if not _QUALITY.match(param) or float(param[2:] or "0") == 0:
                rejected = True
        if rejected:
            continue

        primary = tag.split("-", 1)[0]
        if primary in SUPPORTED_LOCALE_CODES and primary not in found:
            found.append(primary)

    return found


def negotiate_language(
    accept_language: str | None, default: str = PRIMARY_LOCALE
) -> str:
    preferred = parse_accept_language(accept_language)
    return preferred[0] if preferred else default


def resolve_language(
    path: str,
    accept_language: str | None,
    routing_config: RoutingConfig,
    default: str = PRIMARY_LOCALE,
) -> LocaleResolution:
    """Resolve the language for a request path.

    Multi-language disabled:
        ``/en/packages`` redirects to ``/packages``; ``/packages`` is
        rewritten to ``/id/packages`` without a redirect.
    Multi-language enabled:
        ``/en/packages`` passes through; ``/packages`` redirects to the
        Accept-Language choice, e.g. ``/de/packages``.
    Exempt paths always pass through unchanged.
    """
    if default not in SUPPORTED_LOCALE_CODES:
        default = PRIMARY_LOCALE
    if not path.startswith("/"):
        path = "/" + path

    if is_exempt_path(path):
        return LocaleResolution(
            language=negotiate_language(accept_language, default),
            path=path,
            exempt=True,
        )

    prefix, stripped = split_language_prefix(path)

    if not routing_config.enable_multi_language:
        if prefix is not None:
            return LocaleResolution(language=default, path=path, redirect=stripped)
        return LocaleResolution(language=default, path=_with_prefix(default, path))

    if prefix is not None:
        return LocaleResolution(language=prefix, path=path)

    language = negotiate_language(accept_language, default)
    return LocaleResolution(
        language=language, path=path, redirect=_with_prefix(language, path)
    )


def _with_prefix(language: str, path: str) -> str:
    return f"/{language}" if path == "/" else f"/{language}{path}"
