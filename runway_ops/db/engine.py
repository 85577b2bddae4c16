# runway_ops/db/engine.py
"""
Database engine and session management.

PostgreSQL in production; SQLite for local development and tests.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session

from ..settings import settings
from .schema import metadata


def build_engine(database_url: str) -> Engine:
    """
    Create an engine with backend-appropriate pooling.

    Args:
        database_url: SQLAlchemy URL
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # Ensure the parent directory of a file database exists
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connection health
        pool_size=10,
        max_overflow=20,
    )


engine = build_engine(settings.database_url)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def init_db(bind: Engine = None) -> None:
    """Create any missing tables."""
    metadata.create_all(bind or engine)


def get_session() -> Generator[Session, None, None]:
    """
    Get database session.

    Yields a session that auto-closes on context exit.
    For use with FastAPI Depends.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope(factory=None) -> Generator[Session, None, None]:
    """
    Context manager for a unit of work.

    Usage:
        with session_scope() as session:
            session.execute(...)
    """
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection() -> bool:
    """
    Check database connection.

    Returns:
        True if connection successful
    """
    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def acquire_advisory_lock(session: Session, key: str) -> None:
    """
    Serialize writers on `key` until the current transaction ends.

    Uses pg_advisory_xact_lock on PostgreSQL; a no-op elsewhere (SQLite
    serializes writers at the database level).
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    session.execute(
        text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
        {"key": key}
    )
