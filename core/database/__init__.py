"""
Core Database Package.

Provides centralized database management for the framework.
Modules should use these components instead of creating their own connections.
"""

from core.database.base import Base, TimestampMixin
from core.database.engine import create_db_engine, get_engine, close_engine
from core.database.session import (
    create_session_factory,
    get_session_factory,
    session_scope,
    init_database,
    close_db_connections,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Engine
    "create_db_engine",
    "get_engine",
    "close_engine",
    # Session
    "create_session_factory",
    "get_session_factory",
    "session_scope",
    "init_database",
    "close_db_connections",
]
