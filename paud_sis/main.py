"""PAUD school records API — FastAPI application entry point.

Features:
- Lifespan context manager: probes the database on startup, disposes the pool on shutdown
- Structured exception handlers for the domain exceptions
- Request/response logging middleware with request-ID tracing
- /health endpoint reporting database connectivity
"""

from __future__ import annotations

import datetime
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paud_sis.config import get_settings
from paud_sis.exceptions import (
    DatabaseConnectionError,
    InvalidAcademicYearError,
    RecordNotFoundError,
)

# ---------------------------------------------------------------------------
# Logging setup  (must happen before routers are imported)
# ---------------------------------------------------------------------------

_settings = get_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Router imports
# ---------------------------------------------------------------------------

from paud_sis.api import academic_years as _academic_years_module  # noqa: E402
from paud_sis.api import assessments as _assessments_module  # noqa: E402
from paud_sis.api import students as _students_module  # noqa: E402
from paud_sis.database import check_db_connection, dispose_engine  # noqa: E402

# Register all ORM models with the declarative base
import paud_sis.models  # noqa: F401, E402

# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Probe the database on startup and release the pool on shutdown.

    An unreachable database is logged but does not stop the process; requests
    that need it answer 503 until it comes back.
    """
    logger.info("PAUD school records API — starting up (v%s)", _settings.app_version)

    db_health = await check_db_connection()
    if db_health["status"] == "ok":
        logger.info("Database: OK")
    else:
        logger.warning("Database: DEGRADED — %s", db_health.get("detail", "unknown"))

    logger.info("Startup complete — serving requests")
    yield

    logger.info("PAUD school records API — shutting down")
    try:
        await dispose_engine()
    except Exception as exc:
        logger.warning("Error during engine disposal: %s", exc)
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PAUD School Records API",
    description=(
        "Student records and semester development assessments for an early "
        "childhood education centre. Write endpoints accept HTML form posts "
        "and answer with redirects; read endpoints return JSON."
    ),
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "System health and readiness checks."},
        {
            "name": "assessments",
            "description": (
                "Development assessments: bulk rating of one student, single"
                " record edits, listing and detail."
            ),
        },
        {
            "name": "students",
            "description": "Student detail, per-student assessments and report cards.",
        },
        {"name": "academic-years", "description": "Academic-year records."},
    ],
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Any) -> Response:
    """Log every HTTP request with method, path, status, and duration.

    A short UUID-derived ``request_id`` is attached to each log line and
    returned as the ``X-Request-ID`` response header.
    """
    request_id = str(uuid.uuid4())[:8]
    t0 = time.monotonic()
    logger.info("[%s] → %s %s", request_id, request.method, request.url.path)

    try:
        response: Response = await call_next(request)
    except Exception as exc:
        elapsed = (time.monotonic() - t0) * 1000
        logger.error(
            "[%s] ✗ %s %s — unhandled after %.1f ms: %s",
            request_id,
            request.method,
            request.url.path,
            elapsed,
            exc,
        )
        raise

    elapsed = (time.monotonic() - t0) * 1000
    logger.info(
        "[%s] ← %s %s — %d (%.1f ms)",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Structured exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(
    request: Request, exc: RecordNotFoundError
) -> JSONResponse:
    """404 for missing or soft-deleted records."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": f"{exc.entity}_not_found",
            "message": str(exc),
            "id": exc.record_id,
        },
    )


@app.exception_handler(InvalidAcademicYearError)
async def invalid_academic_year_handler(
    request: Request, exc: InvalidAcademicYearError
) -> JSONResponse:
    """422 for academic-year labels that are not ``YYYY/YYYY``."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "invalid_academic_year",
            "message": str(exc),
            "year": exc.year,
        },
    )


@app.exception_handler(DatabaseConnectionError)
async def database_connection_error_handler(
    request: Request, exc: DatabaseConnectionError
) -> JSONResponse:
    """503 for database connectivity failures."""
    logger.error("DatabaseConnectionError: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "database_unavailable", "message": str(exc)},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render FastAPI HTTPExceptions as structured JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )


# ---------------------------------------------------------------------------
# Core routes
# ---------------------------------------------------------------------------


@app.get("/", tags=["health"], summary="API root / service info")
async def root() -> dict[str, str]:
    """Return basic service metadata and navigation links."""
    return {
        "service": "PAUD School Records API",
        "version": _settings.app_version,
        "documentation": "/docs",
        "health": "/health",
        "openapi": "/openapi.json",
    }


@app.get(
    "/health",
    tags=["health"],
    summary="System health check",
    description=(
        "Probes database connectivity. ``status: ok`` means the database"
        " answered; ``status: degraded`` means the API is up but the database"
        " is unreachable."
    ),
)
async def health_check() -> dict[str, Any]:
    db_health = await check_db_connection()
    return {
        "status": "ok" if db_health["status"] == "ok" else "degraded",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "version": _settings.app_version,
        "database": db_health,
    }


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------

app.include_router(_assessments_module.router)
app.include_router(_students_module.router)
app.include_router(_academic_years_module.router)


# ---------------------------------------------------------------------------
# Development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "paud_sis.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=_settings.log_level.lower(),
    )
