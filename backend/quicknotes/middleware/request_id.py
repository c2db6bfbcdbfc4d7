"""
QuickNotes Backend — Request Correlation IDs
==============================================

Every request carries an ID that shows up in the access log, in error
response bodies (`request_id`) and in the X-Request-ID response header.

A caller may supply its own ID in X-Request-ID. It is trimmed and cut to
MAX_REQUEST_ID_LENGTH characters; a blank one is ignored. Otherwise the ID
is the first 8 hex digits of a UUID4.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

# Read by exception handlers and log lines; one value per request task
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(supplied: Optional[str]) -> str:
    """The caller's ID when it is usable, a fresh one otherwise."""
    if supplied:
        supplied = supplied.strip()[:MAX_REQUEST_ID_LENGTH]
        if supplied:
            return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        # Not reset afterwards: the catch-all 500 handler runs outside this middleware
        request_id_var.set(request_id)
        request.state.request_id = request_id
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
