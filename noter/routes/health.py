"""
Noter Backend: Health Check Routes
====================================

What:  Liveness and database-connectivity probes.
How:   /health answers without touching any dependency. /db/health pings the
       database with a short bound and reports the result.
Who:   Container health checks, load balancers, monitoring.

Status codes:
    /health      200 always
    /db/health   200 when the ping succeeds, 503 when it fails or times out
                 (the service is degraded, the request itself is fine)
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from noter.database import Database, get_database
from noter.exceptions import NoterError
from noter.schemas.note import DBHealthResponse, HealthResponse

logger = logging.getLogger(__name__)

# Default bound for the /db/health ping; the Server overrides it from settings
DB_HEALTH_TIMEOUT = 3.0

router = APIRouter(tags=["Health"])
db_router = APIRouter(tags=["Health"])


def rfc3339_now() -> str:
    """Current local time as RFC 3339 with a numeric offset, second precision."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", success="true", time=rfc3339_now())


@db_router.get(
    "/db/health",
    response_model=DBHealthResponse,
    responses={
        200: {"description": "Database reachable", "model": DBHealthResponse},
        503: {"description": "Database unreachable", "model": DBHealthResponse},
    },
    summary="Database connectivity check",
)
async def db_health_check(
    request: Request,
    database: Database = Depends(get_database),
):
    """
    Ping the database within the configured bound.

    The ping runs inside this request's task, so a client disconnect that
    cancels the request also cancels the ping.
    """
    timeout = getattr(request.app.state, "db_health_timeout", DB_HEALTH_TIMEOUT)
    try:
        await database.ping(timeout=timeout)
    except NoterError as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        payload = DBHealthResponse(
            status="error",
            message=f"Database connection failed: {e}",
            timestamp=rfc3339_now(),
        )
        return JSONResponse(status_code=503, content=payload.model_dump())

    return DBHealthResponse(
        status="ok",
        message="Database connection is healthy",
        timestamp=rfc3339_now(),
    )
