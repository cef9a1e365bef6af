"""
Database Engine Management Module.

Provides a singleton Engine for the entire application.
The database URL comes from EvaluationSettings (EVAL_DATABASE_URL).

SQLite URLs get ``check_same_thread=False`` so the engine can be shared
by the request threads of the API server.
"""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

_logger = logging.getLogger(__name__)

# Global engine instance
_engine: Engine | None = None


def _connect_args(database_url: str) -> dict:
    """Return driver-specific connect arguments for the URL."""
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a new engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL.
        echo: Enable SQLAlchemy echo mode for debugging.

    Returns:
        Engine: SQLAlchemy engine instance.
    """
    engine_kwargs: dict = {
        "echo": echo,
        "connect_args": _connect_args(database_url),
    }
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # Share one connection, otherwise each checkout sees an empty database
        engine_kwargs["poolclass"] = StaticPool
    elif not database_url.startswith("sqlite"):
        engine_kwargs.update(pool_pre_ping=True, pool_size=10, max_overflow=20)

    _logger.info(f"Creating database engine for {database_url}")
    return create_engine(database_url, **engine_kwargs)


def get_engine(database_url: str | None = None) -> Engine:
    """
    Get or create the database engine (singleton).

    Args:
        database_url: Overrides the configured URL on first creation.

    Returns:
        Engine: SQLAlchemy engine instance.
    """
    global _engine

    if _engine is None:
        if database_url is None:
            from modules.evaluation.core.config import get_evaluation_settings

            database_url = get_evaluation_settings().database_url
        _engine = create_db_engine(database_url)

    return _engine


def close_engine() -> None:
    """
    Close the database engine and release all connections.

    Should be called during application shutdown.
    """
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None
