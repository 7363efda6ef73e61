"""Block until PostgreSQL answers, so migrations and seeding can run.

Usage:
    python -m toursite.scripts.backend_pre_start
"""

import logging

from sqlalchemy.engine import Engine
from sqlmodel import Session, select
from tenacity import after_log, before_log, retry, stop_after_delay, wait_fixed

from toursite.core.db import engine
from toursite.core.logging import setup_logging

logger = logging.getLogger("toursite.pre_start")

STARTUP_DEADLINE_SECONDS = 300


@retry(
    stop=stop_after_delay(STARTUP_DEADLINE_SECONDS),
    wait=wait_fixed(1),
    before=before_log(logger, logging.DEBUG),
    after=after_log(logger, logging.WARNING),
    reraise=True,
)
def wait_for_database(db_engine: Engine) -> None:
    with Session(db_engine) as session:
        session.exec(select(1))


def main() -> None:
    setup_logging()
    logger.info("Waiting for database at %s", engine.url.render_as_string())
    wait_for_database(engine)
    logger.info("Database is accepting connections")


if __name__ == "__main__":
    main()
