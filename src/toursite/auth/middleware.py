"""Presence gate for the CMS area.

Requests under the protected prefixes that carry no session cookie are
redirected to the login page. Whether the session is actually valid is
decided per operation by the ``get_current_user`` dependency.
"""

from urllib.parse import urlencode

from starlette.requests import cookie_parser
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from toursite.core.config import settings

PROTECTED_PREFIXES = ("/cms", "/admin")


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_protected_path(path: str, login_path: str) -> bool:
    if _matches(path, login_path):
        return False
    return any(_matches(path, prefix) for prefix in PROTECTED_PREFIXES)


def login_redirect_url(path: str, login_path: str) -> str:
    return f"{login_path}?{urlencode({'redirect': path})}"


class CMSGateMiddleware:
    """Pure ASGI middleware redirecting anonymous CMS page requests to login."""

    def __init__(
        self,
        app: ASGIApp,
        cookie_name: str = settings.SESSION_COOKIE_NAME,
        login_path: str = settings.CMS_LOGIN_PATH,
    ) -> None:
        self.app = app
        self.cookie_name = cookie_name
        self.login_path = login_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not is_protected_path(scope["path"], self.login_path):
            await self.app(scope, receive, send)
            return

        cookies: dict[str, str] = {}
        for name, value in scope.get("headers", []):
            if name == b"cookie":
                cookies.update(cookie_parser(value.decode("latin-1")))

        if not cookies.get(self.cookie_name):
            response = RedirectResponse(
                login_redirect_url(scope["path"], self.login_path), status_code=307
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
