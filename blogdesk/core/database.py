"""Async database engine and session configuration."""

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blogdesk.core.config import settings

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def build_engine() -> AsyncEngine | None:
    """Create the async engine, or None when no database is configured."""
    if not settings.database.is_configured:
        logger.warning("DATABASE_URL is not configured, remote store disabled")
        return None
    return create_async_engine(
        settings.database.async_url,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=settings.app.debug and settings.app.is_development,
    )


engine: AsyncEngine | None = build_engine()

async_session_factory: async_sessionmaker[AsyncSession] | None = (
    async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    if engine is not None
    else None
)


async def create_tables(target: AsyncEngine) -> None:
    """Create every table known to the ORM metadata."""
    # Register mappers before create_all.
    import blogdesk.models  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
