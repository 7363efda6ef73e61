from typing import Any
import uuid

from fastapi import APIRouter, Depends

from toursite.auth import (
    CurrentUser,
    SessionDep,
    UserCreate,
    UserPublic,
    UserRole,
    UsersPublic,
    UserStatus,
    UserUpdate,
    create_user,
    delete_user,
    get_user_by_id,
    list_users,
    require_capability,
    update_user,
)
from toursite.auth.roles import Capability
from toursite.core.base_models import Message
from toursite.core.exceptions import ResourceNotFoundError, ValidationError
from toursite.core.logging import get_logger

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_capability(Capability.MANAGE_USERS))],
)
logger = get_logger(__name__)


@router.get("/", response_model=UsersPublic)
def read_users(
    session: SessionDep,
    role: UserRole | None = None,
    status: UserStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Any:
    """Retrieve CMS users (administrators only)."""
    users, count = list_users(
        session=session, role=role, status=status, search=search, skip=skip, limit=limit
    )
    return UsersPublic(data=users, count=count)


@router.post("/", response_model=UserPublic, status_code=201)
def create_user_admin(
    session: SessionDep, current_user: CurrentUser, user_in: UserCreate
) -> Any:
    user = create_user(session=session, user_create=user_in)
    logger.info("user_created_by_admin", user_id=str(user.id), admin_id=str(current_user.id))
    return user


@router.get("/{user_id}", response_model=UserPublic)
def read_user(user_id: uuid.UUID, session: SessionDep) -> Any:
    user = get_user_by_id(session=session, user_id=user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return user


@router.patch("/{user_id}", response_model=UserPublic)
def update_user_admin(
    user_id: uuid.UUID,
    session: SessionDep,
    current_user: CurrentUser,
    user_in: UserUpdate,
) -> Any:
    """Update a user. Suspending or deactivating ends their sessions."""
    user = get_user_by_id(session=session, user_id=user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    if user.id == current_user.id and user_in.status not in (None, UserStatus.ACTIVE):
        raise ValidationError("You cannot deactivate your own account", field="status")
    return update_user(session=session, db_user=user, user_in=user_in)


@router.delete("/{user_id}", response_model=Message)
def delete_user_admin(
    user_id: uuid.UUID, session: SessionDep, current_user: CurrentUser
) -> Any:
    user = get_user_by_id(session=session, user_id=user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    if user.id == current_user.id:
        raise ValidationError("You cannot delete your own account")
    delete_user(session=session, db_user=user)
    return Message(message="User deleted successfully")
