"""Async engine, per-request sessions and the unit-of-work helper."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from orgportal.config import PortalSettings, get_settings
from orgportal.logging_config import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(settings: PortalSettings) -> dict[str, Any]:
    return {
        "echo": settings.database_echo,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


def get_engine() -> AsyncEngine:
    """The process-wide engine, created on first use from PortalSettings."""
    global _engine
    if _engine is None:
        settings = get_settings()
        options = _engine_options(settings)
        _engine = create_async_engine(settings.async_database_url, **options)
        logger.info(
            "database_engine_created",
            pool_size=options["pool_size"],
            max_overflow=options["max_overflow"],
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the shared engine.

    Rows returned by a service must stay readable after it commits, hence
    ``expire_on_commit=False``.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def init_db() -> None:
    """Fail fast at startup if PostgreSQL is unreachable."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        raise
    logger.info("database_connection_verified")


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("database_connections_closed")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, rolled back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Commit the block as one unit of work, rolling back if it raises."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
