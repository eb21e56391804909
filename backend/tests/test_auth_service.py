"""
NoteDesk Backend — Auth Provider Client Tests
===============================================

What:  SupabaseAuthClient against a fake GoTrue server.
How:   httpx.MockTransport answers every request; no network.

What we test:
    ✅ Rejected tokens are "no session", not errors
    ✅ Bad credentials are Unauthorized
    ✅ Transport failures are retried, then surface as AuthProviderError
    ✅ Provider 5xx responses are not retried
"""

from uuid import uuid4

import httpx
import pytest

from notedesk.exceptions import AuthProviderError, UnauthorizedError
from notedesk.services.auth_service import SupabaseAuthClient

USER_ID = str(uuid4())


def _session_payload(access="acc", refresh="ref"):
    return {
        "access_token": access,
        "refresh_token": refresh,
        "expires_in": 3600,
        "user": {"id": USER_ID, "email": "alice@example.com"},
    }


def make_client(handler) -> SupabaseAuthClient:
    http = httpx.AsyncClient(
        base_url="http://auth.test/auth/v1",
        transport=httpx.MockTransport(handler),
        headers={"apikey": "anon"},
    )
    return SupabaseAuthClient("http://auth.test", "anon", http_client=http)


class TestGetUser:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["apikey"] = request.headers.get("apikey")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"id": USER_ID, "email": "alice@example.com"})

        user = await make_client(handler).get_user("tok")

        assert str(user.id) == USER_ID
        assert seen == {"auth": "Bearer tok", "apikey": "anon", "path": "/auth/v1/user"}

    @pytest.mark.asyncio
    async def test_rejected_token_is_none(self):
        client = make_client(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))

        assert await client.get_user("expired") is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = make_client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(AuthProviderError) as exc_info:
            await client.get_user("tok")
        assert exc_info.value.status_code == 500


class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_returns_new_pair(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["grant_type"] == "refresh_token"
            return httpx.Response(200, json=_session_payload("new-acc", "new-ref"))

        session = await make_client(handler).refresh_session("old")

        assert session.access_token == "new-acc"
        assert session.refresh_token == "new-ref"

    @pytest.mark.asyncio
    async def test_spent_refresh_token_is_none(self):
        client = make_client(
            lambda request: httpx.Response(400, json={"error_description": "Invalid Refresh Token"})
        )

        assert await client.refresh_session("spent") is None


class TestSignIn:

    @pytest.mark.asyncio
    async def test_bad_credentials(self):
        client = make_client(
            lambda request: httpx.Response(400, json={"error_description": "Invalid login credentials"})
        )

        with pytest.raises(UnauthorizedError) as exc_info:
            await client.sign_in_with_password("alice@example.com", "wrong")
        assert exc_info.value.message == "Invalid login credentials"

    @pytest.mark.asyncio
    async def test_success(self):
        client = make_client(lambda request: httpx.Response(200, json=_session_payload()))

        session = await client.sign_in_with_password("alice@example.com", "secret")

        assert session.user.email == "alice@example.com"


class TestSignUp:

    @pytest.mark.asyncio
    async def test_confirmation_pending_returns_none(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"id": USER_ID, "email": "a@example.com"})
        )

        assert await client.sign_up("a@example.com", "secret1") is None

    @pytest.mark.asyncio
    async def test_rejected(self):
        client = make_client(lambda request: httpx.Response(422, json={"msg": "User already registered"}))

        with pytest.raises(AuthProviderError) as exc_info:
            await client.sign_up("a@example.com", "secret1")
        assert exc_info.value.message == "User already registered"


class TestRetry:

    @pytest.mark.asyncio
    async def test_transport_errors_retried_then_raised(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AuthProviderError):
            await make_client(handler).get_user("tok")

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"id": USER_ID})

        user = await make_client(handler).get_user("tok")

        assert str(user.id) == USER_ID
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_http_errors_not_retried(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(503, text="unavailable")

        with pytest.raises(AuthProviderError):
            await make_client(handler).get_user("tok")

        assert len(attempts) == 1
