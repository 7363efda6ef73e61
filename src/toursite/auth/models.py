from datetime import datetime
from enum import Enum
import uuid

from pydantic import EmailStr
from sqlmodel import Field, Relationship, SQLModel

from toursite.core.base_models import (
    CreatedAtMixin,
    PaginatedResponse,
    TimestampedTable,
    TimestampResponseMixin,
    UUIDPrimaryKeyMixin,
)


class UserRole(str, Enum):
    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    AUTHOR = "author"
    CONTRIBUTOR = "contributor"
    SUBSCRIBER = "subscriber"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class UserBase(SQLModel):
    username: str = Field(unique=True, index=True, min_length=3, max_length=100)
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    display_name: str = Field(min_length=1, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None, max_length=500)
    role: UserRole = UserRole.SUBSCRIBER
    status: UserStatus = UserStatus.ACTIVE


class User(UserBase, TimestampedTable, table=True):
    hashed_password: str
    login_attempts: int = 0
    locked_until: datetime | None = Field(default=None)
    last_login_at: datetime | None = Field(default=None)
    last_login_ip: str | None = Field(default=None, max_length=100)

    sessions: list["UserSession"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class UserSession(UUIDPrimaryKeyMixin, CreatedAtMixin, table=True):
    """A server-side login session, looked up by the cookie token."""

    __tablename__ = "user_session"

    user_id: uuid.UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    token: str = Field(unique=True, index=True, max_length=128)
    expires_at: datetime
    ip_address: str | None = Field(default=None, max_length=100)
    user_agent: str | None = Field(default=None, max_length=500)

    user: User = Relationship(back_populates="sessions")


class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=128)


class UserUpdate(SQLModel):
    email: EmailStr | None = Field(default=None, max_length=255)
    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None, max_length=500)
    role: UserRole | None = None
    status: UserStatus | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)


class UserPublic(UserBase, TimestampResponseMixin):
    id: uuid.UUID
    last_login_at: datetime | None = None


UsersPublic = PaginatedResponse[UserPublic]


class LoginRequest(SQLModel):
    # Validated by hand so that missing fields map to a 400, not a 422
    username: str | None = None
    password: str | None = None


class LoginResponse(SQLModel):
    user: UserPublic
    expires_at: datetime


class SessionInfo(SQLModel):
    authenticated: bool
    user: UserPublic
    expires_at: datetime | None = None


class ChangePasswordRequest(SQLModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)
    confirm_password: str = Field(min_length=1)
