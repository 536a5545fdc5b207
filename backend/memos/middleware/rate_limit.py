"""
Memos Backend - Rate Limiting Middleware
=========================================

What:  Per-IP sliding window rate limiter.
How:   Keeps the timestamps of each IP's recent requests in memory. Limits
       are read from the serving application's Settings
       (`rate_limit_requests` per `rate_limit_window` seconds).

Algorithm: Sliding Window Log
    1. Drop the IP's timestamps older than the window
    2. If the remaining count reached the limit → 429 with Retry-After
    3. Otherwise record now and continue

    The state is per process. Several workers each enforce their own limit.

Excluded paths: /health and the API documentation.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from memos.config import Settings
from memos.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# What: Inactive IPs are swept once every this many recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        # IP → request timestamps inside the current window, oldest first
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        settings: Settings = request.app.state.settings
        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        # ── Sliding Window: Clean old entries ─────────────────────────────
        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        # ── Check rate limit ──────────────────────────────────────────────
        if len(recent) >= settings.rate_limit_requests:
            exc = RateLimitExceededError(retry_after=int(recent[0] + window - now) + 1)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(recent),
                window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": "",
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        # ── Record this request ───────────────────────────────────────────
        recent.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
