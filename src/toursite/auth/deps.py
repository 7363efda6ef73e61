from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from toursite.auth.crud import SessionFailure, check_session
from toursite.auth.models import User
from toursite.auth.roles import Capability, user_can
from toursite.core.config import settings
from toursite.core.db import get_db
from toursite.core.exceptions import (
    AccountInactiveError,
    AuthorizationError,
    SessionInvalidError,
)

SessionDep = Annotated[Session, Depends(get_db)]


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def get_current_user(session: SessionDep, token: SessionTokenDep) -> User:
    """Get the current user from the session cookie.

    Expired sessions and sessions of inactive users are deleted. Both
    failures tell the client to drop its cookie.

    Raises:
        SessionInvalidError: No cookie, unknown token or expired session
        AccountInactiveError: The user has been deactivated
    """
    user, failure = check_session(session=session, token=token)
    if failure is SessionFailure.INACTIVE:
        raise AccountInactiveError(clear_session_cookie=True)
    if user is None:
        raise SessionInvalidError((failure or SessionFailure.UNKNOWN).value)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_capability(capability: Capability) -> Callable[[User], User]:
    """Dependency factory: the current user must hold ``capability``.

    Usage:
        @router.post("/", dependencies=[Depends(require_capability(Capability.EDIT_POSTS))])
    """

    def checker(current_user: CurrentUser) -> User:
        if not user_can(current_user.role, capability):
            raise AuthorizationError(
                f"Permission denied: {capability.value}", capability=capability.value
            )
        return current_user

    return checker
