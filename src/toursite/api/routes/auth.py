"""Session cookie authentication routes."""

from typing import Any

from fastapi import APIRouter, Request, Response

from toursite.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    SessionDep,
    UserPublic,
    change_password,
    login,
    logout,
)
from toursite.auth.crud import get_session_by_token
from toursite.auth.deps import SessionTokenDep, get_session_token
from toursite.auth.models import LoginResponse, SessionInfo
from toursite.core.base_models import Message
from toursite.core.config import settings
from toursite.core.logging import get_logger
from toursite.core.rate_limit import LOGIN_RATE_LIMIT, limiter

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login_endpoint(
    request: Request,  # Required for rate limiter
    response: Response,
    session: SessionDep,
    body: LoginRequest,
) -> Any:
    """Log in with username (or email) and password.

    Sets an httpOnly ``session_token`` cookie valid for the session lifetime.
    Five consecutive failures lock the account for fifteen minutes.
    """
    user, user_session = login(
        session=session,
        username=body.username.strip() if body.username else None,
        password=body.password,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown"),
    )
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        user_session.token,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        expires=user_session.expires_at,
        path="/",
    )
    return LoginResponse(
        user=UserPublic.model_validate(user), expires_at=user_session.expires_at
    )


@router.post("/logout", response_model=Message)
def logout_endpoint(
    response: Response, session: SessionDep, token: SessionTokenDep
) -> Any:
    """End the current session. Succeeds even without a session."""
    logout(session=session, token=token)
    clear_session_cookie(response)
    return Message(message="Logged out")


@router.get("/session", response_model=SessionInfo)
def read_session(
    request: Request, session: SessionDep, current_user: CurrentUser
) -> Any:
    """Report the user behind the session cookie."""
    token = get_session_token(request)
    user_session = get_session_by_token(session=session, token=token or "")
    return SessionInfo(
        authenticated=True,
        user=UserPublic.model_validate(current_user),
        expires_at=user_session.expires_at if user_session else None,
    )


@router.post("/change-password", response_model=Message)
def change_password_endpoint(
    session: SessionDep,
    current_user: CurrentUser,
    token: SessionTokenDep,
    body: ChangePasswordRequest,
) -> Any:
    """Change the current user's password and sign out their other sessions."""
    change_password(
        session=session,
        user=current_user,
        current_password=body.current_password,
        new_password=body.new_password,
        confirm_password=body.confirm_password,
        current_token=token,
    )
    return Message(message="Password changed successfully")
