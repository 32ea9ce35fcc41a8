"""Database configuration and session management.

Provides the async SQLAlchemy engine and session factory. Both are created
on first use so that importing the package does not open a connection pool.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from catalog_service.infrastructure.config import settings

# Base class for models
Base = declarative_base()


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the process-wide async engine built from settings."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the process-wide engine."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Commits when the consumer finishes cleanly, rolls back otherwise.

    Yields:
        AsyncSession for database operations.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create database tables if they don't exist.

    Args:
        engine: Engine to use, defaults to the process-wide engine.
    """
    # Registers the ORM tables on Base.metadata
    from catalog_service.infrastructure import models  # noqa: F401

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
