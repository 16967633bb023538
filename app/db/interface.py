"""
Database Abstraction Interface

Defines the contract every database backend adapter implements, so the
engine can be built for SQLite or PostgreSQL from the DATABASE_URL alone.

The rest of the code base only sees the AsyncEngine and sessions created
from it; dialect differences (pooling, connect arguments) stay in the
adapters.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    To add a new database backend:
    1. Create a new class inheriting from DatabaseAdapter
    2. Implement the abstract methods
    3. Register its URL scheme in get_database_adapter()
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create and configure the async database engine.

        Args:
            database_url: Connection string for the database
            **kwargs: Additional engine options, merged over the adapter defaults

        Returns:
            Configured AsyncEngine instance
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        pool_class = self.get_pool_class()
        if pool_class is not None:
            engine_kwargs["poolclass"] = pool_class

        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    @abstractmethod
    def get_pool_class(self) -> Optional[type[Pool]]:
        """
        Get the connection pool class for this database type.

        Returns:
            Pool class, or None to use SQLAlchemy's default
        """

    @abstractmethod
    def get_connect_args(self) -> dict[str, Any]:
        """Connection arguments passed to the DBAPI driver."""

    @abstractmethod
    def get_engine_kwargs(self) -> dict[str, Any]:
        """Additional create_async_engine() options."""

    @abstractmethod
    def get_dialect_name(self) -> str:
        """SQLAlchemy dialect name ('sqlite', 'postgresql')."""
