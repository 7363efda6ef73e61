"""Create the first administrator and the default navigation menus.

Usage:
    python -m toursite.scripts.initial_data
"""

import logging

from sqlmodel import Session

from toursite.auth import UserCreate, UserRole, create_user, get_user_by_login
from toursite.core.config import settings
from toursite.core.db import engine
from toursite.navigation.crud import KNOWN_LOCATIONS, ensure_menu
from toursite.site_settings import get_or_create_site_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init(session: Session) -> None:
    """Idempotent: existing rows are left untouched."""
    user = get_user_by_login(session=session, login=settings.FIRST_ADMIN_USERNAME)
    if user is None:
        user = create_user(
            session=session,
            user_create=UserCreate(
                username=settings.FIRST_ADMIN_USERNAME,
                email=settings.FIRST_ADMIN_EMAIL,
                display_name="Administrator",
                password=settings.FIRST_ADMIN_PASSWORD,
                role=UserRole.ADMINISTRATOR,
            ),
        )
        logger.info(f"Created administrator: {user.username}")
    else:
        logger.info(f"Administrator already exists: {user.username}")

    for location in KNOWN_LOCATIONS:
        ensure_menu(session=session, location=location)
    get_or_create_site_settings(session)


def main() -> None:
    logger.info("Creating initial data")
    with Session(engine) as session:
        init(session)
    logger.info("Initial data created")


if __name__ == "__main__":
    main()
