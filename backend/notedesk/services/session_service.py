"""
NoteDesk Backend — Session Resolver
=====================================

What:  Turns an inbound request's cookies into an optional verified identity.
How:   Verifies the access-token cookie with the auth provider; when it is
       missing or expired and a refresh-token cookie exists, rotates the
       session and reports the new tokens as cookie updates for the
       outgoing response.
Who:   RouteGuardMiddleware calls resolve() once per request.

Outcomes of resolve(cookies):
    no cookies                     → user=None, no updates
    valid access token             → user, no updates
    refreshable session            → user, updates setting both new tokens
    refresh rejected               → user=None, updates clearing both cookies
    provider unreachable           → user=None, no updates (logged)
    provider not configured        → user=None, no updates (logged)

"No session" is never raised; absence is an empty result.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from starlette.responses import Response

from notedesk.config import settings
from notedesk.exceptions import AuthProviderError
from notedesk.schemas.auth import AuthSession, AuthUser
from notedesk.services.auth_service import SupabaseAuthClient, auth_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CookieUpdate:
    """A cookie to write on the response; value None deletes it."""
    name: str
    value: Optional[str]


@dataclass
class ResolvedSession:
    user: Optional[AuthUser] = None
    cookie_updates: List[CookieUpdate] = field(default_factory=list)

    @property
    def authenticated(self) -> bool:
        return self.user is not None


def session_cookie_updates(session: AuthSession) -> List[CookieUpdate]:
    return [
        CookieUpdate(settings.access_token_cookie, session.access_token),
        CookieUpdate(settings.refresh_token_cookie, session.refresh_token),
    ]


def clear_cookie_updates() -> List[CookieUpdate]:
    return [
        CookieUpdate(settings.access_token_cookie, None),
        CookieUpdate(settings.refresh_token_cookie, None),
    ]


def apply_cookie_updates(response: Response, updates: List[CookieUpdate]) -> Response:
    """Writes session cookie changes onto an outgoing response."""
    for update in updates:
        if update.value is None:
            response.delete_cookie(
                update.name,
                path="/",
                secure=settings.cookie_secure,
                httponly=True,
                samesite="lax",
            )
        else:
            response.set_cookie(
                update.name,
                update.value,
                max_age=settings.cookie_max_age,
                path="/",
                secure=settings.cookie_secure,
                httponly=True,
                samesite="lax",
            )
    return response


class SessionResolver:

    def __init__(self, client: SupabaseAuthClient):
        self.client = client

    async def resolve(self, cookies: Mapping[str, str]) -> ResolvedSession:
        access_token = cookies.get(settings.access_token_cookie)
        refresh_token = cookies.get(settings.refresh_token_cookie)

        if not access_token and not refresh_token:
            return ResolvedSession()

        if not self.client.is_configured:
            # Cookies are left alone; they may be valid once the provider is set up
            logger.warning("Auth provider not configured; treating request as signed out")
            return ResolvedSession()

        try:
            if access_token:
                user = await self.client.get_user(access_token)
                if user is not None:
                    return ResolvedSession(user=user)

            if not refresh_token:
                # Stale access token with nothing to refresh it with
                return ResolvedSession(cookie_updates=clear_cookie_updates())

            session = await self.client.refresh_session(refresh_token)
        except AuthProviderError as e:
            logger.warning("Session could not be verified: %s", e.message)
            return ResolvedSession()

        if session is None:
            logger.info("Refresh token rejected; clearing session cookies")
            return ResolvedSession(cookie_updates=clear_cookie_updates())

        logger.debug("Session refreshed for user %s", session.user.id)
        return ResolvedSession(
            user=session.user,
            cookie_updates=session_cookie_updates(session),
        )


session_resolver = SessionResolver(auth_client)
