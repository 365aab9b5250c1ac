"""Database configuration, session management and transaction scope.

The engine is configured for SQLite by default: WAL mode so readers are not
blocked while a cascade is being written, and foreign key enforcement so a
hard delete can never leave orphans behind.

Every service mutation runs inside ``transaction(session)``. The context
manager commits once when the block completes and rolls back on any
exception, so a cascade over an event or room subtree is applied completely
or not at all.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from planner.core.config import settings

connect_args = (
    {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive client-supplied datetime; convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def create_db_and_tables():
    """Create all database tables."""
    import planner.models  # noqa: F401  (registers table metadata)

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run a unit of work as one transaction: commit on success, roll back on error."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
