from datetime import datetime, timedelta
from enum import Enum
import math
import uuid

from sqlmodel import Session, col, delete, or_, select

from toursite.auth.models import (
    User,
    UserCreate,
    UserRole,
    UserSession,
    UserStatus,
    UserUpdate,
)
from toursite.core.base_models import ensure_utc, utcnow
from toursite.core.config import settings
from toursite.core.db import paginate
from toursite.core.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    ResourceExistsError,
    ValidationError,
)
from toursite.core.logging import get_logger
from toursite.core.security import (
    generate_session_token,
    get_password_hash,
    verify_password,
)

logger = get_logger(__name__)

# Dummy hash for timing-safe authentication when the user doesn't exist.
# Valid bcrypt hash that never matches, verified at the same cost as a real one.
_DUMMY_HASH = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.VIiOMjKQBNHxMK"


class SessionFailure(str, Enum):
    MISSING = "missing"
    UNKNOWN = "unknown"
    EXPIRED = "expired"
    INACTIVE = "inactive"


def create_user(*, session: Session, user_create: UserCreate) -> User:
    """Create a new user in the database.

    Raises:
        ResourceExistsError: Username or email is taken
    """
    existing = get_user_by_login(session=session, login=user_create.username) or (
        get_user_by_login(session=session, login=user_create.email)
    )
    if existing is not None:
        field = "username" if existing.username == user_create.username else "email"
        raise ResourceExistsError("User", field)

    db_obj = User.model_validate(
        user_create,
        update={"hashed_password": get_password_hash(user_create.password)},
    )
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    logger.info("user_created", user_id=str(db_obj.id), role=db_obj.role.value)
    return db_obj


def update_user(*, session: Session, db_user: User, user_in: UserUpdate) -> User:
    """Update a user. Moving a user out of ``active`` ends all their sessions."""
    user_data = user_in.model_dump(exclude_unset=True)
    extra_data = {"updated_at": utcnow()}
    if "password" in user_data:
        password = user_data.pop("password")
        if password:
            extra_data["hashed_password"] = get_password_hash(password)
    if user_data.get("email") and user_data["email"] != db_user.email:
        taken = get_user_by_login(session=session, login=user_data["email"])
        if taken is not None and taken.id != db_user.id:
            raise ResourceExistsError("User", "email")

    db_user.sqlmodel_update(user_data, update=extra_data)
    session.add(db_user)
    if db_user.status != UserStatus.ACTIVE:
        revoke_user_sessions(session=session, user=db_user, commit=False)
    session.commit()
    session.refresh(db_user)
    return db_user


def delete_user(*, session: Session, db_user: User) -> None:
    revoke_user_sessions(session=session, user=db_user, commit=False)
    session.delete(db_user)
    session.commit()
    logger.info("user_deleted", user_id=str(db_user.id))


def get_user_by_id(*, session: Session, user_id: uuid.UUID) -> User | None:
    return session.get(User, user_id)


def get_user_by_login(*, session: Session, login: str) -> User | None:
    """Look a user up by username or email."""
    statement = select(User).where(or_(User.username == login, User.email == login))
    return session.exec(statement).first()


def list_users(
    *,
    session: Session,
    role: UserRole | None = None,
    status: UserStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[User], int]:
    statement = select(User)
    if role is not None:
        statement = statement.where(User.role == role)
    if status is not None:
        statement = statement.where(User.status == status)
    if search:
        pattern = f"%{search}%"
        statement = statement.where(
            or_(
                col(User.username).ilike(pattern),
                col(User.email).ilike(pattern),
                col(User.display_name).ilike(pattern),
            )
        )
    return paginate(
        session, statement, skip=skip, limit=limit, order_by=col(User.created_at).desc()
    )


def _minutes_until(moment: datetime) -> int:
    return max(1, math.ceil((ensure_utc(moment) - utcnow()).total_seconds() / 60))


def login(
    *,
    session: Session,
    username: str | None,
    password: str | None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[User, UserSession]:
    """Check credentials, enforce lockout and open a new session.

    Raises:
        ValidationError: Username or password missing
        AuthenticationError: Unknown user or wrong password
        AccountLockedError: Locked now, or this failure reached the limit
        AccountInactiveError: The account is not active
    """
    if not username or not password:
        raise ValidationError("Username and password are required")

    user = get_user_by_login(session=session, login=username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        raise AuthenticationError("Invalid username or password")

    now = utcnow()
    if user.locked_until is not None:
        if ensure_utc(user.locked_until) > now:
            raise AccountLockedError(_minutes_until(user.locked_until))
        # Lock expired; start counting again
        user.locked_until = None
        user.login_attempts = 0

    if user.status != UserStatus.ACTIVE:
        raise AccountInactiveError()

    if not verify_password(password, user.hashed_password):
        user.login_attempts += 1
        remaining = settings.MAX_LOGIN_ATTEMPTS - user.login_attempts
        if remaining <= 0:
            user.locked_until = now + timedelta(minutes=settings.LOCKOUT_DURATION_MINUTES)
        session.add(user)
        session.commit()
        if remaining <= 0:
            logger.warning(
                "account_locked",
                user_id=str(user.id),
                attempts=user.login_attempts,
                ip_address=ip_address,
            )
            raise AccountLockedError(settings.LOCKOUT_DURATION_MINUTES)
        logger.info("login_failed", user_id=str(user.id), attempts_remaining=remaining)
        raise AuthenticationError(
            "Invalid username or password", attempts_remaining=remaining
        )

    user_session = UserSession(
        user_id=user.id,
        token=generate_session_token(),
        expires_at=now + timedelta(days=settings.SESSION_EXPIRY_DAYS),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    user.login_attempts = 0
    user.locked_until = None
    user.last_login_at = now
    user.last_login_ip = ip_address
    session.add(user_session)
    session.add(user)
    session.commit()
    session.refresh(user)
    session.refresh(user_session)
    logger.info("login_succeeded", user_id=str(user.id), ip_address=ip_address)
    return user, user_session


def get_session_by_token(*, session: Session, token: str) -> UserSession | None:
    return session.exec(select(UserSession).where(UserSession.token == token)).first()


def check_session(
    *, session: Session, token: str | None
) -> tuple[User | None, SessionFailure | None]:
    """Look up the user behind a session token.

    Returns ``(user, None)`` on success, otherwise ``(None, reason)``.
    Expired sessions and sessions of inactive users are deleted on sight.
    """
    if not token:
        return None, SessionFailure.MISSING
    user_session = get_session_by_token(session=session, token=token)
    if user_session is None:
        return None, SessionFailure.UNKNOWN

    reason = None
    if ensure_utc(user_session.expires_at) <= utcnow():
        reason = SessionFailure.EXPIRED
    elif user_session.user is None or user_session.user.status != UserStatus.ACTIVE:
        reason = SessionFailure.INACTIVE
    if reason is not None:
        session.delete(user_session)
        session.commit()
        return None, reason
    return user_session.user, None


def authenticate_session(*, session: Session, token: str | None) -> User | None:
    """Return the user behind a session token, or None."""
    user, _ = check_session(session=session, token=token)
    return user


def logout(*, session: Session, token: str | None) -> None:
    if not token:
        return
    session.exec(delete(UserSession).where(UserSession.token == token))
    session.commit()


def revoke_user_sessions(
    *,
    session: Session,
    user: User,
    keep_token: str | None = None,
    commit: bool = True,
) -> None:
    """Delete the user's sessions, optionally keeping the current one."""
    statement = delete(UserSession).where(UserSession.user_id == user.id)
    if keep_token is not None:
        statement = statement.where(UserSession.token != keep_token)
    session.exec(statement)
    if commit:
        session.commit()


def change_password(
    *,
    session: Session,
    user: User,
    current_password: str,
    new_password: str,
    confirm_password: str,
    current_token: str | None = None,
) -> None:
    """Replace the user's password and end every other session.

    Raises:
        ValidationError: Confirmation mismatch
        AuthenticationError: Current password is wrong
    """
    if new_password != confirm_password:
        raise ValidationError("New passwords do not match", field="confirm_password")
    if not verify_password(current_password, user.hashed_password):
        raise AuthenticationError("Current password is incorrect")

    user.hashed_password = get_password_hash(new_password)
    user.updated_at = utcnow()
    session.add(user)
    revoke_user_sessions(session=session, user=user, keep_token=current_token, commit=False)
    session.commit()
    logger.info("password_changed", user_id=str(user.id))
