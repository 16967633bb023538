"""
Database Adapters

SQLite and PostgreSQL implementations of DatabaseAdapter, plus the factory
that picks one from the connection string.

SQLite is the default: file-based, no server, good for development, tests
and single-instance deployments. PostgreSQL (asyncpg driver) is meant for
production where several workers write clicks concurrently.
"""

from typing import Any, Optional

from sqlalchemy.pool import NullPool, Pool

from app.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    - NullPool: one connection per session, the file lock serialises writers
    - check_same_thread=False: required by aiosqlite
    """

    def get_pool_class(self) -> Optional[type[Pool]]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {"check_same_thread": False}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {"echo": False}

    def get_dialect_name(self) -> str:
        return "sqlite"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter (postgresql+asyncpg://...).

    Uses SQLAlchemy's default queue pool with pre-ping so connections dropped
    by the server are replaced transparently.
    """

    def __init__(self, pool_size: int = 10, max_overflow: int = 20):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def get_pool_class(self) -> Optional[type[Pool]]:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the adapter matching a connection string.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./app.db

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the URL scheme is not supported
    """
    scheme = database_url.split(":", 1)[0].lower()
    dialect = scheme.split("+", 1)[0]

    if dialect == "sqlite":
        return SQLiteAdapter()
    if dialect in ("postgresql", "postgres"):
        return PostgreSQLAdapter()
    raise ValueError(f"Unsupported database URL scheme: {scheme}")
