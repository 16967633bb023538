"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface with SQLite and PostgreSQL implementations
- Session management and table creation
"""

from app.db.interface import DatabaseAdapter
from app.db.session import (
    async_session_maker,
    dispose_engine,
    engine,
    get_session,
    init_models,
)

__all__ = [
    "DatabaseAdapter",
    "async_session_maker",
    "dispose_engine",
    "engine",
    "get_session",
    "init_models",
]
