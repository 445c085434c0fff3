"""Database configuration and session management.

All gateway data lives in the application database:
- Job tracks and questions (the practice catalog, read-only here)
- Submitted answers with their AI feedback
- Per-user daily usage quotas
"""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import QueuePool

from interview_coach.config import get_app_database_url


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves foreign keys off unless asked, per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for ``database_url`` (defaults to the configured URL).

    SQLite is used by local tooling and tests; it cannot share connections
    across threads without ``check_same_thread=False`` and does not take the
    PostgreSQL pool options.
    """
    url = database_url or get_app_database_url()

    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        url,
        future=True,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


# ============================================================================
# Application Database Engine
# ============================================================================

engine = build_engine()

SessionLocal = build_session_factory(engine)


def get_db():
    """Yield a database session for request-scoped operations."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Optional[Engine] = None) -> None:
    """Create any missing tables from the ORM models."""
    # Import models so they register with Base.metadata
    from interview_coach.models.sql import answer, catalog, quota  # noqa: F401

    Base.metadata.create_all(bind or engine)
