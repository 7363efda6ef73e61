"""Role capabilities for CMS users.

Each role maps to a fixed set of capabilities; routes declare the capability
they need and :func:`user_can` decides.
"""

from enum import Enum

from toursite.auth.models import UserRole


class Capability(str, Enum):
    # Site administration
    MANAGE_OPTIONS = "manage_options"
    EDIT_THEME_OPTIONS = "edit_theme_options"

    # User management
    MANAGE_USERS = "manage_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"

    # Packages
    EDIT_PACKAGES = "edit_packages"
    DELETE_PACKAGES = "delete_packages"
    PUBLISH_PACKAGES = "publish_packages"
    EDIT_PUBLISHED_PACKAGES = "edit_published_packages"
    DELETE_PUBLISHED_PACKAGES = "delete_published_packages"

    # Blog posts and other editorial content
    EDIT_POSTS = "edit_posts"
    DELETE_POSTS = "delete_posts"
    PUBLISH_POSTS = "publish_posts"
    EDIT_PUBLISHED_POSTS = "edit_published_posts"
    DELETE_PUBLISHED_POSTS = "delete_published_posts"

    UPLOAD_FILES = "upload_files"
    MODERATE_COMMENTS = "moderate_comments"


_EDITOR_CAPABILITIES = {
    Capability.EDIT_PACKAGES,
    Capability.DELETE_PACKAGES,
    Capability.PUBLISH_PACKAGES,
    Capability.EDIT_PUBLISHED_PACKAGES,
    Capability.DELETE_PUBLISHED_PACKAGES,
    Capability.EDIT_POSTS,
    Capability.DELETE_POSTS,
    Capability.PUBLISH_POSTS,
    Capability.EDIT_PUBLISHED_POSTS,
    Capability.DELETE_PUBLISHED_POSTS,
    Capability.UPLOAD_FILES,
    Capability.MODERATE_COMMENTS,
}

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMINISTRATOR: frozenset(Capability),
    UserRole.EDITOR: frozenset(_EDITOR_CAPABILITIES),
    UserRole.AUTHOR: frozenset(
        {
            Capability.EDIT_PACKAGES,
            Capability.PUBLISH_PACKAGES,
            Capability.EDIT_PUBLISHED_PACKAGES,
            Capability.DELETE_PUBLISHED_PACKAGES,
            Capability.EDIT_POSTS,
            Capability.PUBLISH_POSTS,
            Capability.EDIT_PUBLISHED_POSTS,
            Capability.DELETE_PUBLISHED_POSTS,
            Capability.UPLOAD_FILES,
        }
    ),
    UserRole.CONTRIBUTOR: frozenset(
        {
            Capability.EDIT_PACKAGES,
            Capability.DELETE_PACKAGES,
            Capability.EDIT_POSTS,
            Capability.DELETE_POSTS,
        }
    ),
    UserRole.SUBSCRIBER: frozenset(),
}


def user_can(role: UserRole | str, capability: Capability | str) -> bool:
    try:
        role = UserRole(role)
        capability = Capability(capability)
    except ValueError:
        return False
    return capability in ROLE_CAPABILITIES[role]


def can_access_cms(role: UserRole | str) -> bool:
    return role != UserRole.SUBSCRIBER
