"""
NoteDesk Backend — Request Logging Middleware
===============================================

What:  One access-log line per HTTP request.
How:   Times the downstream app, then logs method, path, status, duration
       and the resolved user id. Level follows the status class; guard
       redirects are tagged so sign-in bounces are easy to grep.

Privacy:
    Logged:      method, path, status, duration, user id, request ID
    Never logged: request bodies (note content), cookies, Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notedesk.middleware.request_id import user_id_var

logger = logging.getLogger("notedesk.access")

QUIET_PATHS = frozenset({"/health", "/favicon.ico"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Resolved by RouteGuardMiddleware further down the chain, whose
        # ContextVar writes do not flow back out to this task
        user = getattr(request.state, "user", None)
        if user is not None:
            user_id_var.set(str(user.id))
        location = response.headers.get("location")
        suffix = f" → {location}" if response.status_code == 307 and location else ""

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            suffix,
            extra={
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
