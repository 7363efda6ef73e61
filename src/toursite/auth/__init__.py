from toursite.auth.crud import (
    SessionFailure,
    authenticate_session,
    change_password,
    check_session,
    create_user,
    delete_user,
    get_user_by_id,
    get_user_by_login,
    list_users,
    login,
    logout,
    revoke_user_sessions,
    update_user,
)
from toursite.auth.deps import (
    CurrentUser,
    SessionDep,
    get_current_user,
    require_capability,
)
from toursite.auth.middleware import CMSGateMiddleware
from toursite.auth.models import (
    ChangePasswordRequest,
    LoginRequest,
    User,
    UserCreate,
    UserPublic,
    UserRole,
    UserSession,
    UsersPublic,
    UserStatus,
    UserUpdate,
)
from toursite.auth.roles import Capability, can_access_cms, user_can

__all__ = [
    # Dependencies
    "CurrentUser",
    "SessionDep",
    "get_current_user",
    "require_capability",
    "CMSGateMiddleware",
    # Models
    "ChangePasswordRequest",
    "LoginRequest",
    "User",
    "UserCreate",
    "UserPublic",
    "UserRole",
    "UserSession",
    "UserStatus",
    "UserUpdate",
    "UsersPublic",
    # Roles
    "Capability",
    "can_access_cms",
    "user_can",
    # CRUD
    "SessionFailure",
    "authenticate_session",
    "change_password",
    "check_session",
    "create_user",
    "delete_user",
    "get_user_by_id",
    "get_user_by_login",
    "list_users",
    "login",
    "logout",
    "revoke_user_sessions",
    "update_user",
]
