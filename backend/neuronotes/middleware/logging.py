"""
NeuroNotes Backend: Request Logging Middleware
==============================================

What:  One access-log line per request: method, path, status, duration,
       request ID and client IP.
How:   Times the downstream call; the log level follows the status class
       (5xx ERROR, 4xx WARNING, else INFO). A request that raises is logged
       as 500 before the exception propagates.

Not logged: request bodies, form fields (passwords), cookies or headers.
Skipped:    /health and /favicon.ico.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from neuronotes.middleware.request_id import request_id_var

logger = logging.getLogger("neuronotes.access")

QUIET_PATHS = {"/health", "/favicon.ico"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            self._log(request.method, path, 500, start_time, client_ip)
            raise

        self._log(request.method, path, response.status_code, start_time, client_ip)
        return response

    @staticmethod
    def _log(method: str, path: str, status: int, start_time: float, client_ip: str) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            method, path, status, duration_ms, rid, client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
