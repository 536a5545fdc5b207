"""
Memos Backend - Request Logging Middleware
===========================================

What:  One access log line per HTTP request on the `memos.access` logger.
How:   Times the call below this middleware and logs method, path, status,
       duration, response size and request ID. Blob downloads are logged
       under their route prefix so resource uids and filenames stay out of
       the access log.

Never logged: request bodies, memo content, uploaded bytes, the
Authorization header.

Level by status class:
    5xx → ERROR, 4xx → WARNING, anything else → INFO
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from memos.middleware.request_id import request_id_var

logger = logging.getLogger("memos.access")

# Probed every few seconds by orchestrators
QUIET_PATHS = {"/health"}

BLOB_PREFIX = "/o/r/"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def loggable_path(path: str) -> str:
    if path.startswith(BLOB_PREFIX):
        return f"{BLOB_PREFIX}..."
    return path


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = loggable_path(request.url.path)
        size = response.headers.get("content-length", "-")
        rid = request_id_var.get("")
        logger.log(
            level_for_status(response.status_code),
            "[%s] %s %s → %d (%s bytes, %.1fms)",
            rid,
            request.method,
            path,
            response.status_code,
            size,
            elapsed_ms,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response
