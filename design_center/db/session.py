"""Async SQLAlchemy session management."""

from __future__ import annotations

from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..core.config import get_settings
from ..core.logging import mask_credentials

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return a singleton async engine bound to the configured database."""

    global _engine
    if _engine is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is not configured")
        logger.info("db.engine_created", url=mask_credentials(settings.database_url))
        _engine = create_async_engine(settings.database_url, future=True)
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return a lazily initialised session factory."""

    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async session."""

    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session


async def init_db() -> None:
    """Create tables for all registered models if they do not exist."""

    # Import models to ensure metadata is populated before create_all.
    from .. import models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db() -> bool:
    """Return True when the database answers a trivial query."""

    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("db.ping_failed", error=str(exc))
        return False
    return True


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""

    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
