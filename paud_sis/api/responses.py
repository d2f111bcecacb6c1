"""Rendering of :class:`FormState` values as HTTP responses."""

import logging

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from paud_sis.schemas.forms import FormState
from paud_sis.services.cache import TagCache

logger = logging.getLogger(__name__)


async def form_response(state: FormState, db: AsyncSession, cache: TagCache) -> Response:
    """Turn a form outcome into a redirect or a ``400 {"error": ...}`` body.

    A failed submission rolls the request session back so nothing it staged
    is committed by the session dependency. A successful one is committed
    here, and only then are its cache tags invalidated, so a concurrent read
    cannot repopulate a view from uncommitted state.
    """
    if state.error is not None:
        await db.rollback()
    else:
        await db.commit()
        if state.invalidate_tags:
            cache.invalidate(*state.invalidate_tags)
            logger.debug("Committed write; invalidated %s", state.invalidate_tags)
    if state.redirect_url is not None:
        return RedirectResponse(state.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": state.error}
    )
