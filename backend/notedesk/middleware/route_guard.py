"""
NoteDesk Backend — Route Guard Middleware
===========================================

What:  Resolves the session on every request and keeps page navigation
       consistent with it.
How:   Calls the SessionResolver once, stores the identity on
       `request.state.user` for downstream handlers (the RPC context reads
       it), redirects page requests that the transition table rejects,
       and writes any refreshed session cookies onto the response.

Transition table (navigable page requests only):
    | authenticated | path class | action                 |
    |---------------|------------|------------------------|
    | False         | protected  | redirect → sign-in     |
    | True          | auth-only  | redirect → dashboard   |
    | otherwise     | —          | pass through unchanged |

API, docs, health and static asset paths are never redirected; API
procedures report a missing session as an Unauthorized error instead.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from notedesk.config import settings
from notedesk.middleware.request_id import user_id_var
from notedesk.services.session_service import (
    SessionResolver,
    apply_cookie_updates,
    session_resolver,
)

logger = logging.getLogger(__name__)

AUTH_ONLY_PREFIXES = ("/signin", "/signup", "/auth", "/forgot-password", "/reset-password")

# Served without a session lookup at all. Exact paths also cover their
# sub-paths ("/docs/oauth2-redirect"), never siblings ("/healthy-habits").
UNGUARDED_PATHS = ("/docs", "/redoc", "/openapi.json", "/health", "/favicon.ico")
STATIC_PREFIX = "/static/"
ASSET_SUFFIXES = (".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp")

# Session is resolved, but never redirected
NON_NAVIGABLE_PREFIXES = ("/api/",)


def is_auth_only_path(path: str) -> bool:
    return path.startswith(AUTH_ONLY_PREFIXES)


def is_public_path(path: str) -> bool:
    return path == "/" or is_auth_only_path(path)


def _matches_path(path: str, base: str) -> bool:
    return path == base or path.startswith(base + "/")


def is_unguarded_path(path: str) -> bool:
    if path.startswith(STATIC_PREFIX) or path.lower().endswith(ASSET_SUFFIXES):
        return True
    return any(_matches_path(path, base) for base in UNGUARDED_PATHS)


def is_navigable_path(path: str) -> bool:
    return not (is_unguarded_path(path) or path.startswith(NON_NAVIGABLE_PREFIXES) or path == "/api")


def guard_redirect(authenticated: bool, path: str) -> Optional[str]:
    """Where to send a page request, or None to let it through."""
    if not authenticated and not is_public_path(path):
        return settings.sign_in_path
    if authenticated and is_auth_only_path(path):
        return settings.dashboard_path
    return None


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Session-aware page guard.

    The resolver defaults to the application-wide SessionResolver; tests
    pass their own.
    """

    def __init__(self, app, resolver: Optional[SessionResolver] = None):
        super().__init__(app)
        self.resolver = resolver

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        request.state.user = None

        if is_unguarded_path(path):
            return await call_next(request)

        resolver = self.resolver or session_resolver
        resolved = await resolver.resolve(request.cookies)
        request.state.user = resolved.user
        if resolved.user is not None:
            user_id_var.set(str(resolved.user.id))

        if is_navigable_path(path):
            target = guard_redirect(resolved.authenticated, path)
            if target is not None:
                logger.debug("Guard redirect %s → %s", path, target)
                redirect = RedirectResponse(
                    url=str(request.url.replace(path=target, query="")),
                    status_code=307,
                )
                return apply_cookie_updates(redirect, resolved.cookie_updates)

        response = await call_next(request)
        return apply_cookie_updates(response, resolved.cookie_updates)
