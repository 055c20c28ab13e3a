"""Database session and metadata helpers."""

from .session import (
    Base,
    dispose_engine,
    get_engine,
    get_session,
    get_sessionmaker,
    init_db,
    ping_db,
)

__all__ = [
    "Base",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_db",
    "ping_db",
]
