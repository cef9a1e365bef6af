"""Core module - Application kernel components."""
from core.logging_config import setup_logging
from core.server import create_app, create_base_app
from core import database

__all__ = [
    "create_app",
    "create_base_app",
    "setup_logging",
    "database",
]
