"""Application errors and the HTTP responses they become.

Services raise these; the handlers in ``main.py`` render them as
``{"error_code", "message", "details", "message_key"}`` with ``message``
translated into the request locale via ``message_key`` and ``params``.
"""

from typing import Any


class AppException(Exception):
    """Base for every error that should reach the client as JSON.

    ``message`` is the English fallback when ``message_key`` has no
    catalog entry. Set ``clear_session_cookie`` on subclasses whose response
    must also expire the session cookie.
    """

    clear_session_cookie: bool = False

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        *,
        message_key: str | None = None,
        params: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.message_key = message_key
        self.params = {k: v for k, v in (params or {}).items() if v is not None}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.message_key:
            result["message_key"] = self.message_key
        return result


class AuthenticationError(AppException):
    """User authentication failed (bad credentials, missing session)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        attempts_remaining: int | None = None,
    ):
        message_key = "error_auth_failed"
        params: dict[str, Any] = {}
        details: dict[str, Any] = {}
        if attempts_remaining is not None:
            message_key = "error_invalid_credentials_with_attempts"
            params["attempts"] = attempts_remaining
            details["attempts_remaining"] = attempts_remaining
        super().__init__(
            message,
            "AUTH_FAILED",
            401,
            details,
            message_key=message_key,
            params=params,
        )


class SessionInvalidError(AppException):
    """Session cookie is missing, unknown or expired."""

    clear_session_cookie = True

    def __init__(self, reason: str = "missing"):
        super().__init__(
            "Session is invalid or expired",
            "SESSION_INVALID",
            401,
            {"reason": reason},
            message_key="error_session_invalid",
        )


class AuthorizationError(AppException):
    """User is authenticated but lacks permission for this action."""

    def __init__(self, message: str = "Permission denied", capability: str | None = None):
        super().__init__(
            message,
            "FORBIDDEN",
            403,
            {"capability": capability} if capability else {},
            message_key="error_permission_denied",
        )


class AccountInactiveError(AppException):
    """The account exists but has been deactivated."""

    def __init__(self, *, clear_session_cookie: bool = False):
        self.clear_session_cookie = clear_session_cookie
        super().__init__(
            "Account is inactive",
            "ACCOUNT_INACTIVE",
            403,
            message_key="error_account_inactive",
        )


class AccountLockedError(AppException):
    """Too many failed logins; the account is temporarily locked."""

    def __init__(self, minutes_remaining: int):
        super().__init__(
            f"Account is locked. Try again in {minutes_remaining} minutes",
            "ACCOUNT_LOCKED",
            423,
            {"minutes_remaining": minutes_remaining},
            message_key="error_account_locked",
            params={"minutes": minutes_remaining},
        )


def _code(resource: str, suffix: str) -> str:
    """``"Navigation item"`` -> ``"NAVIGATION_ITEM_NOT_FOUND"``."""
    return f"{resource.upper().replace(' ', '_')}_{suffix}"


class ResourceNotFoundError(AppException):
    """No row for this id or slug."""

    def __init__(self, resource: str, identifier: str | None = None):
        details: dict[str, Any] = {"resource": resource}
        if identifier:
            details["id"] = identifier
            message = f"{resource} not found: {identifier}"
        else:
            message = f"{resource} not found"
        super().__init__(
            message,
            _code(resource, "NOT_FOUND"),
            404,
            details,
            message_key="error_not_found_with_id" if identifier else "error_not_found",
            params={"resource": resource, "id": identifier},
        )


class ResourceExistsError(AppException):
    """A unique column (slug, username, email) is already taken."""

    def __init__(self, resource: str, field: str | None = None):
        details: dict[str, Any] = {"resource": resource}
        if field:
            details["field"] = field
            message = f"{resource} with this {field} already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(
            message,
            _code(resource, "EXISTS"),
            409,
            details,
            message_key="error_already_exists_with_field"
            if field
            else "error_already_exists",
            params={"resource": resource, "field": field},
        )


class ValidationError(AppException):
    """Input that passed schema validation but breaks a business rule."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message,
            "VALIDATION_ERROR",
            400,
            {"field": field} if field else {},
            message_key="error_validation_with_message",
            params={"message": message},
        )


class RateLimitError(AppException):
    """Raised in place of slowapi's ``RateLimitExceeded`` so 429s share our shape."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, "RATE_LIMIT_EXCEEDED", 429, message_key="error_rate_limit")


class ExternalServiceError(AppException):
    """A third-party service (DeepL, a search engine) failed or is unreachable."""

    def __init__(self, service: str, message: str | None = None):
        super().__init__(
            f"{service}: {message}" if message else f"{service} is unavailable",
            "EXTERNAL_SERVICE_ERROR",
            503,
            {"service": service},
            message_key="error_service_unavailable_with_message"
            if message
            else "error_service_unavailable",
            params={"service": service, "message": message},
        )


class TranslationProviderError(ExternalServiceError):
    """Machine-translation call failed or the provider is not configured."""

    def __init__(self, message: str, provider: str = "DeepL"):
        super().__init__(provider, message)
        self.error_code = "TRANSLATION_PROVIDER_ERROR"


class TimeoutError(AppException):
    """An outbound call ran past its deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"{operation} timed out after {timeout_seconds}s",
            "TIMEOUT",
            504,
            {"operation": operation, "timeout_seconds": timeout_seconds},
            message_key="error_timeout_with_seconds",
            params={"operation": operation, "seconds": timeout_seconds},
        )


class BackupError(AppException):
    """Creating, reading or restoring a backup failed."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(
            message,
            "BACKUP_ERROR",
            500,
            {"filename": filename} if filename else {},
            message_key="error_backup_with_message",
            params={"message": message},
        )
