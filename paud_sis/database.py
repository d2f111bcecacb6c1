"""
Database access for the PAUD school records service.

One async engine per process, talking to PostgreSQL through asyncpg. Pool
size and statement echo come from :class:`paud_sis.config.Settings`.

Routes receive a request-scoped session through ``get_async_db``. Form
writes commit it themselves before dropping cached views (see
``paud_sis.api.responses``); the commit here is for whatever is left.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from paud_sis.config import get_settings
from paud_sis.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

_ASYNC_SCHEME = "postgresql+asyncpg://"


def _async_url(url: str) -> str:
    """Point a plain ``postgresql://`` URL (as hosting panels hand out) at asyncpg."""
    for plain in ("postgresql://", "postgres://"):
        if url.startswith(plain):
            return _ASYNC_SCHEME + url[len(plain):]
    return url


def _build_engine() -> AsyncEngine:
    settings = get_settings()
    return create_async_engine(
        _async_url(settings.database_url),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
        pool_pre_ping=True,
        echo=settings.sql_echo,
    )


engine: AsyncEngine = _build_engine()

# Rows stay readable after commit; redirects and read models use them.
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield the request session; commit on success, roll back on error.

    Raises:
        DatabaseConnectionError: PostgreSQL could not be reached.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except (OperationalError, InterfaceError, OSError) as exc:
            logger.error("Database unreachable: %s", exc)
            raise DatabaseConnectionError(str(exc)) from exc
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    await engine.dispose()


async def check_db_connection() -> dict[str, Any]:
    """Run ``SELECT 1`` for ``/health`` and the startup log.

    Never raises; a failure is reported as ``{"status": "error", "detail": ...}``.
    """
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Database health probe failed: %s", exc)
        return {"status": "error", "detail": str(exc)}
    return {"status": "ok"}


__all__: list[str] = [
    "AsyncSessionLocal",
    "engine",
    "get_async_db",
    "dispose_engine",
    "check_db_connection",
]
