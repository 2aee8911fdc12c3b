"""
Card Service — Request ID Middleware
======================================

What:  Tags every request with a short correlation id and echoes it back in
       the `X-Request-ID` response header.
Why:   Lets one request's handler log lines and access line be grepped
       together, and lets a client quote the id when reporting a failure.
How:   Reuses a client-supplied `X-Request-ID` if present, otherwise takes
       the first 8 characters of a fresh UUID4. The id lives in a ContextVar
       so RequestIDLogFilter can stamp it on every log record.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns and propagates a per-request correlation id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


class RequestIDLogFilter(logging.Filter):
    """
    Stamps every log record with the current request id.

    Installed on the root handler by setup_logging(), so service lines such
    as `API: add_card | Added: ...` carry the same id as the access line.
    Records logged outside a request get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True
