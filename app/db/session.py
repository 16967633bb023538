"""
Database Session Management

Async engine and session factory built through the adapter layer, plus the
startup/shutdown hooks used by the application lifespan.

Key Features:
- Adapter chosen from settings.DATABASE_URL (SQLite or PostgreSQL)
- Request-scoped sessions: commit on success, rollback on exception
- init_models() creates missing tables when no migrations are run
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from app.core.setting import settings
from app.db import models  # noqa: F401  registers tables on SQLModel.metadata
from app.db.sqlite_adapter import get_database_adapter

logger = logging.getLogger(__name__)

db_adapter = get_database_adapter(settings.DATABASE_URL)

engine = db_adapter.create_engine(settings.DATABASE_URL)

async_session_maker = async_sessionmaker(
    engine,
    class_=SQLModelAsyncSession,
    expire_on_commit=False,  # Objects stay usable after commit
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    Commits on successful completion of the endpoint, rolls back and
    re-raises on any exception.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_models() -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(f"Database tables ready ({db_adapter.get_dialect_name()})")


async def dispose_engine() -> None:
    """Close all pooled connections."""
    await engine.dispose()
