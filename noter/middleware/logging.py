"""
Noter Backend: Request Logging Middleware
===========================================

What:  Logs every HTTP request on arrival and again on completion.
How:   On arrival: "METHOD path [request-id]". On completion: method, path,
       status and duration, at a level chosen from the status code.
When:  Inside RequestIDMiddleware, so the request ID is already set.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, client IP, request ID
    ❌ Don't log: request bodies (note titles are user content)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from noter.middleware.request_id import request_id_var

logger = logging.getLogger("noter.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Announces each request before it is handled and records its outcome.

    Levels:
        5xx → ERROR
        4xx → WARNING
        else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        logger.info("%s %s [%s]", method, path, rid)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
