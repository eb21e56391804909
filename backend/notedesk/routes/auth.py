"""
NoteDesk Backend — Auth Route Handlers
========================================

What:  Sign-in, sign-up, sign-out and password-reset endpoints backing the
       auth-only pages.
How:   Delegates to the hosted auth provider; the issued tokens are stored
       only in httponly session cookies, never in response bodies.

    POST /api/auth/signin           → sets session cookies
    POST /api/auth/signup           → sets session cookies when auto-confirmed
    POST /api/auth/signout          → revokes and clears session cookies
    POST /api/auth/forgot-password  → provider emails a reset link
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notedesk.config import settings
from notedesk.exceptions import AuthProviderError
from notedesk.schemas.auth import (
    PasswordResetRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from notedesk.schemas.common import ErrorResponse
from notedesk.services import auth_service
from notedesk.services.session_service import (
    apply_cookie_updates,
    clear_cookie_updates,
    session_cookie_updates,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _session_json(body: SessionResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post(
    "/signin",
    response_model=SessionResponse,
    responses={401: {"description": "Wrong email or password", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def sign_in(body: SignInRequest) -> JSONResponse:
    session = await auth_service.auth_client.sign_in_with_password(body.email, body.password)
    logger.info("User %s signed in", session.user.id)
    response = _session_json(SessionResponse(user=session.user, message="Signed in"))
    return apply_cookie_updates(response, session_cookie_updates(session))


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=201,
    responses={502: {"description": "Provider rejected the sign-up", "model": ErrorResponse}},
    summary="Create an account",
)
async def sign_up(body: SignUpRequest) -> JSONResponse:
    session = await auth_service.auth_client.sign_up(body.email, body.password, body.name)
    if session is None:
        return _session_json(
            SessionResponse(message="Check your email to confirm your account"),
            status_code=201,
        )
    logger.info("User %s signed up", session.user.id)
    response = _session_json(SessionResponse(user=session.user, message="Account created"), 201)
    return apply_cookie_updates(response, session_cookie_updates(session))


@router.post("/signout", response_model=SessionResponse, summary="Sign out")
async def sign_out(request: Request) -> JSONResponse:
    access_token = request.cookies.get(settings.access_token_cookie)
    if access_token:
        try:
            await auth_service.auth_client.sign_out(access_token)
        except AuthProviderError as e:
            # Cookies are cleared regardless; the provider expires the token on its own
            logger.warning("Provider sign-out failed: %s", e.message)
    response = _session_json(SessionResponse(message="Signed out"))
    return apply_cookie_updates(response, clear_cookie_updates())


@router.post(
    "/forgot-password",
    response_model=SessionResponse,
    summary="Send a password-reset email",
)
async def forgot_password(body: PasswordResetRequest) -> JSONResponse:
    await auth_service.auth_client.send_password_reset(
        body.email,
        redirect_to=f"{settings.site_url.rstrip('/')}/reset-password",
    )
    return _session_json(
        SessionResponse(message="If that address has an account, a reset link is on its way")
    )
