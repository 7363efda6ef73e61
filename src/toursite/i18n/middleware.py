"""Locale middleware: language prefix routing for page requests.

For every HTTP request it runs the locale resolver against the current
routing config and then either redirects the client, rewrites the path the
app sees, or passes the request through. The chosen language is stored in
the locale contextvar and echoed as Content-Language.

Uses pure ASGI middleware to avoid BaseHTTPMiddleware's contextvars issues.
See: https://github.com/encode/starlette/discussions/1729
"""

from starlette.datastructures import MutableHeaders
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from toursite.core.logging import get_logger
from toursite.i18n.config import DEFAULT_LOCALE
from toursite.i18n.context import LOCALE_STATE_KEY, reset_locale, set_locale
from toursite.i18n.resolver import resolve_language
from toursite.i18n.routing import RoutingConfigProvider

logger = get_logger(__name__)


class LocaleMiddleware:
    """Pure ASGI middleware applying locale resolution to each request."""

    def __init__(
        self,
        app: ASGIApp,
        routing_provider: RoutingConfigProvider,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self.app = app
        self.routing_provider = routing_provider
        self.default_locale = default_locale

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers: dict[bytes, bytes] = dict(scope.get("headers", []))
        accept_language = headers.get(b"accept-language", b"").decode("latin-1")

        resolution = resolve_language(
            scope["path"],
            accept_language,
            self.routing_provider.get(),
            self.default_locale,
        )

        if resolution.redirect is not None:
            query = scope.get("query_string", b"").decode("latin-1")
            location = f"{resolution.redirect}?{query}" if query else resolution.redirect
            logger.debug(
                "locale_redirect",
                path=scope["path"],
                location=location,
                language=resolution.language,
            )
            response = RedirectResponse(location, status_code=307)
            response.headers["Content-Language"] = resolution.language
            response.headers["Vary"] = "Accept-Language"
            await response(scope, receive, send)
            return

        if resolution.path != scope["path"]:
            scope = dict(scope)
            scope["path"] = resolution.path
            scope["raw_path"] = resolution.path.encode("utf-8")

        scope.setdefault("state", {})
        scope["state"][LOCALE_STATE_KEY] = resolution.language
        token = set_locale(resolution.language)

        async def send_with_locale(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                response_headers["Content-Language"] = resolution.language
            await send(message)

        try:
            await self.app(scope, receive, send_with_locale)
        finally:
            reset_locale(token)
