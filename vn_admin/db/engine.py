"""Database engine and session management."""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vn_admin.core.settings import get_settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Make SQLite enforce the unit -> province foreign key."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str | None = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        url: Database URL. If None, uses the DATABASE_URL setting.
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    url = url or get_settings().database_url
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},  # Allow multi-threaded access
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_size=20,
        max_overflow=30,
        pool_recycle=300,
        pool_pre_ping=True,
    )


# Global engine and session factory (initialized lazily)
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def get_engine(url: str | None = None, echo: bool = False) -> Engine:
    """Get or create the global database engine."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(url, echo)
    return _engine


def get_session_factory(url: str | None = None) -> sessionmaker:
    """Get or create the global session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine(url))
    return _SessionLocal


def reset_engine() -> None:
    """Reset the global engine and session factory (useful for testing)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def get_session(url: str | None = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_session() as session:
            repo = AdminRepository(session)
    """
    session = get_session_factory(url)()
    try:
        yield session
    finally:
        session.close()


def init_db(url: str | None = None) -> None:
    """Create all tables that do not exist yet."""
    from vn_admin.db.models import Base

    Base.metadata.create_all(bind=get_engine(url))
