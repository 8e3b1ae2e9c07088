"""
Storefront Backend — Request ID Middleware
============================================

What:  Tags each request with a short correlation ID.
How:   Reuses the caller's X-Request-ID header when present, otherwise
       generates one; stores it in a ContextVar and echoes it back in the
       response header.

The error handlers in main.py read request_id_var so that every JSON error
body carries the same ID as the access log line for that request.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. X-Request-ID from the client wins, so storefront and admin UIs can
           correlate their own error reports
        2. Otherwise an 8-character hex ID is generated
        3. The ID is exposed via request_id_var and request.state.request_id
        4. The response carries it back in X-Request-ID
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
