"""
NoteDesk Backend — Session Resolver Tests
===========================================

What:  Cookie → identity resolution, including refresh and fail-closed paths.
How:   The auth client is an AsyncMock; no network calls.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from starlette.responses import Response

from notedesk.exceptions import AuthProviderError
from notedesk.schemas.auth import AuthSession, AuthUser
from notedesk.services.auth_service import SupabaseAuthClient
from notedesk.services.session_service import (
    CookieUpdate,
    SessionResolver,
    apply_cookie_updates,
    clear_cookie_updates,
)

ACCESS = "sb-access-token"
REFRESH = "sb-refresh-token"


@pytest.fixture
def user():
    return AuthUser(id=uuid4(), email="alice@example.com")


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.is_configured = True
    mock.get_user = AsyncMock(return_value=None)
    mock.refresh_session = AsyncMock(return_value=None)
    return mock


class TestResolve:

    @pytest.mark.asyncio
    async def test_no_cookies_is_anonymous(self, client):
        resolved = await SessionResolver(client).resolve({})

        assert resolved.user is None
        assert resolved.cookie_updates == []
        client.get_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_valid_access_token(self, client, user):
        client.get_user.return_value = user

        resolved = await SessionResolver(client).resolve({ACCESS: "good"})

        assert resolved.authenticated
        assert resolved.user == user
        assert resolved.cookie_updates == []
        client.get_user.assert_awaited_once_with("good")
        client.refresh_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_token_without_refresh_clears_cookies(self, client):
        resolved = await SessionResolver(client).resolve({ACCESS: "expired"})

        assert resolved.user is None
        assert resolved.cookie_updates == clear_cookie_updates()

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, client, user):
        client.refresh_session.return_value = AuthSession(
            access_token="new-access", refresh_token="new-refresh", user=user
        )

        resolved = await SessionResolver(client).resolve({ACCESS: "expired", REFRESH: "r1"})

        assert resolved.user == user
        assert CookieUpdate(ACCESS, "new-access") in resolved.cookie_updates
        assert CookieUpdate(REFRESH, "new-refresh") in resolved.cookie_updates
        client.refresh_session.assert_awaited_once_with("r1")

    @pytest.mark.asyncio
    async def test_refresh_only_cookie(self, client, user):
        client.refresh_session.return_value = AuthSession(
            access_token="a", refresh_token="r", user=user
        )

        resolved = await SessionResolver(client).resolve({REFRESH: "r1"})

        assert resolved.user == user
        client.get_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejected_refresh_clears_cookies(self, client):
        resolved = await SessionResolver(client).resolve({ACCESS: "expired", REFRESH: "spent"})

        assert resolved.user is None
        assert all(update.value is None for update in resolved.cookie_updates)
        assert len(resolved.cookie_updates) == 2

    @pytest.mark.asyncio
    async def test_provider_outage_fails_closed(self, client):
        client.get_user.side_effect = AuthProviderError()

        resolved = await SessionResolver(client).resolve({ACCESS: "tok", REFRESH: "r"})

        assert resolved.user is None
        assert resolved.cookie_updates == []

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_not_called(self):
        http = AsyncMock()
        unconfigured = SupabaseAuthClient(base_url="", anon_key="", http_client=http)

        resolved = await SessionResolver(unconfigured).resolve({ACCESS: "tok", REFRESH: "r"})

        assert resolved.user is None
        assert resolved.cookie_updates == []
        http.request.assert_not_awaited()


class TestApplyCookieUpdates:

    def test_sets_httponly_cookie(self):
        response = apply_cookie_updates(Response(), [CookieUpdate(ACCESS, "abc")])

        header = response.headers["set-cookie"]
        assert header.startswith(f"{ACCESS}=abc")
        assert "httponly" in header.lower()
        assert "samesite=lax" in header.lower()

    def test_deletes_cookie(self):
        response = apply_cookie_updates(Response(), [CookieUpdate(REFRESH, None)])

        header = response.headers["set-cookie"]
        assert header.startswith(f"{REFRESH}=")
        assert "max-age=0" in header.lower()
