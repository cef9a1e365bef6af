"""
Database Session Management Module.

Provides database session management using SQLAlchemy 2.0 patterns.
Repositories receive a session factory instead of creating connections.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.database.base import Base
from core.database.engine import close_engine, get_engine


# Global session factory (initialized lazily)
_session_factory: sessionmaker[Session] | None = None


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the given engine."""
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Returns:
        sessionmaker[Session]: Session factory for creating database sessions.
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())

    return _session_factory


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Context manager for one transactional unit of work.

    Commits on success, rolls back on any exception.

    Example:
        with session_scope() as session:
            session.add(row)
    """
    factory = session_factory or get_session_factory()

    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def init_database(engine: Engine | None = None) -> None:
    """
    Initialize database schema.

    Creates all tables defined in models if they don't exist.
    """
    # Import models so they register with Base.metadata
    import modules.evaluation.models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def close_db_connections() -> None:
    """Dispose the engine and drop the cached session factory."""
    global _session_factory

    _session_factory = None
    close_engine()
