"""Request-scoped locale context using contextvars.

The locale middleware stores the resolved site language here so handlers,
the error handler and the static translator can read it without passing
it around.
"""

from contextvars import ContextVar, Token

from toursite.i18n.config import DEFAULT_LOCALE

_locale_context: ContextVar[str] = ContextVar("locale", default=DEFAULT_LOCALE)

# Key used in request scope state for locale
LOCALE_STATE_KEY = "_i18n_locale"


def get_locale() -> str:
    """Get the current request's locale, or DEFAULT_LOCALE outside a request."""
    return _locale_context.get()


def set_locale(locale: str) -> Token[str]:
    """Set the locale for the current request context.

    Returns:
        Token that can be used with reset_locale to restore previous value.
    """
    return _locale_context.set(locale)


def reset_locale(token: Token[str]) -> None:
    _locale_context.reset(token)
