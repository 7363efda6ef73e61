from collections.abc import Generator
from typing import Any, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, func, select
from sqlmodel.sql.expression import SelectOfScalar

from toursite.core.config import settings


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for PostgreSQL, or SQLite for local runs and tests.

    In-memory SQLite gets a StaticPool so every session shares one
    connection (and therefore one database).
    """
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
    )


engine = build_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.DEBUG and settings.ENVIRONMENT == "local",
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind: Engine | None = None) -> None:
    """Create all tables known to the metadata (SQLite / first run only).

    PostgreSQL deployments use Alembic migrations instead.
    """
    import toursite.models  # noqa: F401 - register every table

    SQLModel.metadata.create_all(bind or engine)


T = TypeVar("T", bound=SQLModel)


def paginate(
    session: Session,
    statement: SelectOfScalar[T],
    skip: int = 0,
    limit: int = 100,
    order_by: InstrumentedAttribute[Any] | Any | None = None,
) -> tuple[list[T], int]:
    """Execute a paginated query and return results with total count.

    Args:
        session: Database session
        statement: Base SQLModel select statement (without pagination)
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
        order_by: Optional column to order by

    Returns:
        Tuple of (list of results, total count)
    """
    count_statement = select(func.count()).select_from(statement.subquery())
    count = session.exec(count_statement).one()

    if order_by is not None:
        statement = statement.order_by(order_by)

    paginated_statement = statement.offset(skip).limit(limit)
    results = session.exec(paginated_statement).all()

    return list(results), count
