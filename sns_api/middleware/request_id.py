"""
SNS API Server — Request ID Middleware
=======================================

What:  Gives every request a short correlation ID and echoes it back in the
       X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID or generates 8 hex chars of a
       UUID4, stores it in a ContextVar for loggers and exception handlers,
       and on request.state for route code.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns X-Request-ID to the request context and the response."""

    header_name = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(self.header_name) or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[self.header_name] = rid
        return response
