"""Async engine and session factory for the preview-flag store.

The store is one small table hit by single-row reads and upserts.  The
pool is small, checkouts are pinged, and statements are cut off after
``PREVIEW_DB_COMMAND_TIMEOUT`` seconds.

The engine is created lazily and shared for the process lifetime; call
``dispose_engine()`` on shutdown.
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from triage_db.config import get_async_url

_POOL_SIZE = int(os.getenv("PREVIEW_DB_POOL_SIZE", "2"))
_MAX_OVERFLOW = int(os.getenv("PREVIEW_DB_MAX_OVERFLOW", "3"))
# Seconds; asyncpg cancels a statement that runs longer.
_COMMAND_TIMEOUT = float(os.getenv("PREVIEW_DB_COMMAND_TIMEOUT", "5"))
_POOL_RECYCLE = int(os.getenv("PREVIEW_DB_POOL_RECYCLE", "1800"))

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_preview_engine(url: str | None = None) -> AsyncEngine:
    """Build an engine tuned for the preview-flag table.

    No connection is opened until the engine is first used.
    """
    return create_async_engine(
        url or get_async_url(),
        pool_size=_POOL_SIZE,
        max_overflow=_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=_POOL_RECYCLE,
        connect_args={"command_timeout": _COMMAND_TIMEOUT},
    )


def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_preview_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded flags readable after the request commits."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
