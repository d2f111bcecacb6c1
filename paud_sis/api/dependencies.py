"""FastAPI dependency injection helpers.

Provides reusable ``Depends``-compatible callables for:
- ``get_db()``        → async database session
- ``get_settings()``  → application settings
- ``get_cache()``     → process-wide read-view cache
- ``get_store()``     → assessment data-access port bound to the request session
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from paud_sis.config import Settings
from paud_sis.config import get_settings as _get_settings_impl
from paud_sis.database import get_async_db
from paud_sis.services.cache import TagCache, get_tag_cache
from paud_sis.services.sql_store import SqlAlchemyAssessmentStore
from paud_sis.services.store import AssessmentStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Database session
# ---------------------------------------------------------------------------


async def get_db(
    db: AsyncSession = Depends(get_async_db),
) -> AsyncSession:
    """Provide an async database session to route handlers.

    Thin wrapper around :func:`paud_sis.database.get_async_db` so handlers can
    use ``Annotated[AsyncSession, Depends(get_db)]``.
    """
    return db


DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    """Return the cached application settings."""
    return _get_settings_impl()


SettingsDep = Annotated[Settings, Depends(get_settings)]


# ---------------------------------------------------------------------------
# Cache and store
# ---------------------------------------------------------------------------


def get_cache() -> TagCache:
    """Return the process-wide :class:`TagCache`."""
    return get_tag_cache()


CacheDep = Annotated[TagCache, Depends(get_cache)]


def get_store(db: DBDep) -> AssessmentStore:
    """Bind a :class:`SqlAlchemyAssessmentStore` to the request session."""
    return SqlAlchemyAssessmentStore(db)


StoreDep = Annotated[AssessmentStore, Depends(get_store)]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class Pagination:
    """``skip`` / ``limit`` query parameters bounded by settings."""

    def __init__(self, skip: int, limit: int) -> None:
        self.skip = skip
        self.limit = limit


def get_pagination(
    settings: SettingsDep,
    skip: int = Query(default=0, ge=0, description="Rows to skip"),
    limit: int | None = Query(default=None, ge=1, description="Page size"),
) -> Pagination:
    """Resolve the page window, rejecting limits above ``max_page_size``.

    Raises:
        HTTPException: 422 if ``limit`` exceeds the configured maximum.
    """
    if limit is None:
        limit = settings.default_page_size
    if limit > settings.max_page_size:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"limit must be <= {settings.max_page_size}",
        )
    return Pagination(skip=skip, limit=limit)


PaginationDep = Annotated[Pagination, Depends(get_pagination)]
