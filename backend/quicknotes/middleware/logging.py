"""
QuickNotes Backend — Access Log
=================================

Writes one line per request to the `quicknotes.access` logger:

    PATCH /api/notes/65a1f0c2e4b0a1b2c3d4e5f6 -> 404 (3.2ms) rid=1f2e3d4c

The fields also ride along as `extra` for structured handlers. The
connectivity probes are polled by monitors and are not logged. Note
titles and content never appear here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from quicknotes.middleware.request_id import request_id_var

logger = logging.getLogger("quicknotes.access")

UNLOGGED_PATHS = frozenset({"/health", "/api/status/mongodb"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _log_request(request: Request, status: int, started: float) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    request_id = request_id_var.get("")
    logger.log(
        level_for_status(status),
        "%s %s -> %d (%.1fms) rid=%s",
        request.method,
        request.url.path,
        status,
        elapsed_ms,
        request_id,
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else None,
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Answered as a 500 by the outermost error handler
            _log_request(request, 500, started)
            raise

        _log_request(request, response.status_code, started)
        return response
