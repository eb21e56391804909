"""
NoteDesk Backend — Hosted Auth Provider Client
================================================

What:  Thin async client for the Supabase GoTrue REST API.
How:   One shared httpx.AsyncClient; transport failures (connection reset,
       timeouts) are retried with tenacity, HTTP error responses are not.
Who:   Used by the SessionResolver on every request and by the auth routes.

Endpoints used:
    GET  /auth/v1/user                           → verify an access token
    POST /auth/v1/token?grant_type=refresh_token → rotate a session
    POST /auth/v1/token?grant_type=password      → sign in
    POST /auth/v1/signup                         → create an account
    POST /auth/v1/recover                        → send a password-reset email
    POST /auth/v1/logout                         → revoke the refresh token

Every call carries the project's anon key in the `apikey` header.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
    RetryError,
)

from notedesk.config import settings
from notedesk.exceptions import AuthProviderError, UnauthorizedError
from notedesk.schemas.auth import AuthSession, AuthUser

logger = logging.getLogger(__name__)


def _user_from_payload(payload: Dict[str, Any]) -> AuthUser:
    return AuthUser(id=payload["id"], email=payload.get("email"))


def _session_from_payload(payload: Dict[str, Any]) -> AuthSession:
    return AuthSession(
        access_token=payload["access_token"],
        refresh_token=payload["refresh_token"],
        expires_in=payload.get("expires_in"),
        user=_user_from_payload(payload["user"]),
    )


class SupabaseAuthClient:
    """
    Async client for the hosted auth provider.

    Return conventions:
        get_user / refresh_session → None when the provider says the token
            is invalid or expired ("no session" is not an error)
        sign_in_with_password      → UnauthorizedError on bad credentials
        anything else unexpected   → AuthProviderError
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self._client = http_client or httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=timeout,
            headers={"apikey": anon_key},
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.anon_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Transport ─────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        try:
            return await self._send_with_retry(method, path, headers, params, json)
        except RetryError as e:
            last = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "Auth provider unreachable after %d attempts: %s %s (%s)",
                settings.retry_max_attempts,
                method,
                path,
                type(last).__name__ if last else "unknown",
            )
            raise AuthProviderError(context={"path": path})

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _send_with_retry(
        self,
        method: str,
        path: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, str]],
        json: Optional[Dict[str, Any]],
    ) -> httpx.Response:
        return await self._client.request(
            method, path, headers=headers, params=params, json=json
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"HTTP {response.status_code}"
        )

    # ── Session verification ──────────────────────────────────────────────

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """The user owning `access_token`, or None when the token is rejected."""
        response = await self._request("GET", "/user", access_token=access_token)
        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )
        return _user_from_payload(response.json())

    async def refresh_session(self, refresh_token: str) -> Optional[AuthSession]:
        """A fresh token pair, or None when the refresh token is spent or revoked."""
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        if response.status_code in (400, 401, 403):
            return None
        if response.status_code != 200:
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )
        return _session_from_payload(response.json())

    # ── Account flows ─────────────────────────────────────────────────────

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401):
            raise UnauthorizedError(message=self._error_message(response))
        if response.status_code != 200:
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )
        return _session_from_payload(response.json())

    async def sign_up(
        self, email: str, password: str, name: Optional[str] = None
    ) -> Optional[AuthSession]:
        """
        Create an account.

        Returns a session when the project auto-confirms emails, None when
        the provider sends a confirmation email first.
        """
        body: Dict[str, Any] = {"email": email, "password": password}
        if name:
            body["data"] = {"name": name}
        response = await self._request("POST", "/signup", json=body)
        if response.status_code not in (200, 201):
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )
        payload = response.json()
        if payload.get("access_token"):
            return _session_from_payload(payload)
        return None

    async def send_password_reset(self, email: str, redirect_to: str) -> None:
        response = await self._request(
            "POST",
            "/recover",
            params={"redirect_to": redirect_to},
            json={"email": email},
        )
        if response.status_code not in (200, 204):
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session server-side. An already-invalid token is fine."""
        response = await self._request("POST", "/logout", access_token=access_token)
        if response.status_code not in (200, 204, 401, 403):
            raise AuthProviderError(
                message=self._error_message(response),
                status_code=response.status_code,
            )


# ── Singleton Instance ────────────────────────────────────────────────────
auth_client = SupabaseAuthClient(
    base_url=settings.supabase_url,
    anon_key=settings.supabase_anon_key,
    timeout=settings.auth_timeout_seconds,
)
