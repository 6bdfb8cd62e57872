"""
NeuroNotes Backend: AI Rate Limiting Middleware
===============================================

What:  Per-IP sliding window limit on the AI endpoints.
How:   In-memory map of client IP → timestamps of recent AI requests.
Who:   Applies to /api/ai/* and the /ai/* page posts; every other path
       passes through untouched.

Algorithm (sliding window log):
    1. Drop timestamps older than RATE_LIMIT_WINDOW seconds
    2. If RATE_LIMIT_REQUESTS remain, reject with 429 and Retry-After
    3. Otherwise record now and continue

State is per process. Several uvicorn workers each keep their own window.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from neuronotes.config import settings
from neuronotes.exceptions import RateLimitExceededError
from neuronotes.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Inactive IPs are swept once this many IPs are tracked
CLEANUP_THRESHOLD = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter for text-generation calls.

    Limits are read from settings on every request.
    """

    LIMITED_PREFIXES = ("/api/ai/", "/ai/")

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)

    def is_limited(self, path: str) -> bool:
        return path.startswith(self.LIMITED_PREFIXES)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_limited(request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window = settings.rate_limit_window
        window_start = now - window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= settings.rate_limit_requests:
            retry_after = int(recent[0] + window - now) + 1
            error = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s: %d AI requests in %ds window",
                client_ip, len(recent), window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": error.message,
                    "request_id": request_id_var.get(""),
                    "details": error.context,
                },
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)

        if len(self._requests) > CLEANUP_THRESHOLD:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
