"""
NoteDesk Backend — Request Correlation
========================================

What:  Per-request correlation data for logs and error envelopes.
How:   RequestIDMiddleware picks the request ID (a well-formed client
       `X-Request-ID`, otherwise a fresh one) and echoes it back.
       RouteGuardMiddleware records the resolved user id. Both live in
       ContextVars, and RequestContextFilter stamps them onto every log
       record as `%(request_id)s` / `%(user_id)s`.
"""

import logging
import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="-")

# Client IDs end up in log lines; anything else is replaced
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def choose_request_id(supplied: str) -> str:
    if supplied and _CLIENT_ID_PATTERN.match(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestContextFilter(logging.Filter):
    """Adds request_id and user_id to records; "-" outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.user_id = user_id_var.get()
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = choose_request_id(request.headers.get("X-Request-ID", ""))
        request_id_var.set(rid)
        user_id_var.set("-")
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
