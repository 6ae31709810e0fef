"""
Noter Backend: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() installs middleware, exception handlers and the static
       routes; bind_database_routes() adds the routes that need a Database
       once the Server has connected one.
Who:   Called by noter.server.Server and by the test fixtures.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Static routes:       GET /   GET /health           │
    │  Database routes:     GET /db/health                │
    │                       POST/GET /notes               │
    │                       GET /notes/{id}               │
    │                                                     │
    │  Exception Handlers (plain-text bodies):            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from noter import __version__
from noter.database import Database
from noter.exceptions import (
    DatabaseError,
    NoterError,
    NotFoundError,
    ValidationError,
)
from noter.middleware.logging import RequestLoggingMiddleware
from noter.middleware.request_id import RequestIDMiddleware, request_id_var
from noter.routes import health, home, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire process.

    Called once by the entry point before anything else logs.
    Format: 2026-01-15T12:00:00 [INFO] noter.access: GET /notes [a1b2c3d4]
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic.runtime.migration").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Log the ASGI startup and shutdown events.

    Connecting and closing the database is owned by the Server, which runs
    before the app starts and after it stops.
    """
    logger.info("Noter API %s accepting requests", __version__)
    yield
    logger.info("Noter API stopped accepting requests")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes with plain-text bodies.

    Handler hierarchy:
        RequestValidationError → 400 "Invalid request body"
        ValidationError        → 400 (message)
        NotFoundError          → 404 (message)
        DatabaseError          → 500 (message)
        NoterError (base)      → 500 (message)
        Exception (fallback)   → 500 "Internal Server Error"

    The health routes build their own JSON responses and never reach here.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON, a non-object body, or a title that is not a string."""
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return PlainTextResponse("Invalid request body", status_code=400)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Database error during %s: %s | Context: %s",
            rid,
            exc.operation or "request",
            str(exc),
            exc.context,
        )
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(NoterError)
    async def handle_noter_error(request: Request, exc: NoterError):
        rid = request_id_var.get("")
        logger.error("[%s] %s error: %s", rid, exc.kind.value, str(exc))
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None, db_health_timeout: Optional[float] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Only the static routes are bound unless a database is supplied, in which
    case the database routes are bound as well (used by tests).
    """
    app = FastAPI(
        title="Noter API",
        description="Create, list and fetch notes stored in PostgreSQL.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID runs first, then Logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(home.router)
    app.include_router(health.router)

    if database is not None:
        bind_database_routes(app, database, db_health_timeout=db_health_timeout)

    return app


def bind_database_routes(
    app: FastAPI,
    database: Database,
    db_health_timeout: Optional[float] = None,
) -> None:
    """
    Attach the database handle to the app and mount the routes that use it.

    Call once per app.
    """
    app.state.database = database
    if db_health_timeout is not None:
        app.state.db_health_timeout = db_health_timeout

    app.include_router(health.db_router)
    app.include_router(notes.router)
