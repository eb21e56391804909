"""
NoteDesk Backend — Page Routes
================================

What:  Minimal server-rendered pages that the Route Guard protects.
How:   Plain HTML strings; forms post to /api/auth/* and data comes from
       the same owner-scoped repositories the RPC procedures use.

Public:     /  /signin  /signup  /forgot-password  /reset-password
Protected:  /dashboard  /notes  /profile
"""

import html
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from notedesk.config import settings
from notedesk.exceptions import NotFoundError
from notedesk.routers import RequestContext
from notedesk.routes.deps import get_request_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)


def _page(title: str, body: str) -> HTMLResponse:
    return HTMLResponse(
        "<!doctype html><html><head><meta charset='utf-8'>"
        f"<title>{html.escape(title)} · NoteDesk</title></head>"
        f"<body><main>{body}</main></body></html>"
    )


def _nav() -> str:
    return (
        "<nav><a href='/dashboard'>Dashboard</a> · <a href='/notes'>Notes</a> · "
        "<a href='/profile'>Profile</a> · "
        "<form method='post' action='/api/auth/signout' style='display:inline'>"
        "<button type='submit'>Sign out</button></form></nav>"
    )


def _require_session(request: Request):
    if getattr(request.state, "user", None) is None:
        return RedirectResponse(settings.sign_in_path, status_code=307)
    return None


# ── Public pages ──────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    return _page(
        "Welcome",
        "<h1>NoteDesk</h1><p>Your notes, your profile.</p>"
        "<p><a href='/signin'>Sign in</a> or <a href='/signup'>create an account</a>.</p>",
    )


@router.get("/signin", response_class=HTMLResponse)
async def signin_page() -> HTMLResponse:
    return _page(
        "Sign in",
        "<h1>Sign in</h1>"
        "<form id='signin'><input name='email' type='email' required>"
        "<input name='password' type='password' required>"
        "<button type='submit'>Sign in</button></form>"
        "<p><a href='/forgot-password'>Forgot password?</a> · <a href='/signup'>Sign up</a></p>",
    )


@router.get("/signup", response_class=HTMLResponse)
async def signup_page() -> HTMLResponse:
    return _page(
        "Sign up",
        "<h1>Create an account</h1>"
        "<form id='signup'><input name='name'><input name='email' type='email' required>"
        "<input name='password' type='password' minlength='6' required>"
        "<button type='submit'>Sign up</button></form>",
    )


@router.get("/forgot-password", response_class=HTMLResponse)
async def forgot_password_page() -> HTMLResponse:
    return _page(
        "Forgot password",
        "<h1>Reset your password</h1>"
        "<form id='forgot-password'><input name='email' type='email' required>"
        "<button type='submit'>Send reset link</button></form>",
    )


@router.get("/reset-password", response_class=HTMLResponse)
async def reset_password_page() -> HTMLResponse:
    return _page("Reset password", "<h1>Choose a new password</h1><form id='reset-password'></form>")


# ── Protected pages ───────────────────────────────────────────────────────

@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    redirect = _require_session(request)
    if redirect:
        return redirect
    try:
        profile = await ctx.profiles.get()
        name = profile.name or "User"
    except NotFoundError:
        logger.warning("No profile row for user %s", ctx.user.id)
        name = "User"
    return _page(
        "Dashboard",
        _nav() + f"<h1>Welcome back, {html.escape(name)}!</h1>"
        "<ul><li><a href='/notes'>View notes</a></li>"
        "<li><a href='/profile'>Edit profile</a></li></ul>",
    )


@router.get("/notes", response_class=HTMLResponse)
async def notes_page(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    redirect = _require_session(request)
    if redirect:
        return redirect
    notes = await ctx.notes.list()
    if notes:
        items = "".join(
            f"<li><strong>{html.escape(n.title)}</strong><p>{html.escape(n.content)}</p></li>"
            for n in notes
        )
        listing = f"<ul id='notes'>{items}</ul>"
    else:
        listing = "<p>No notes yet. Create your first one!</p>"
    return _page("Notes", _nav() + "<h1>Notes</h1>" + listing)


@router.get("/profile", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    redirect = _require_session(request)
    if redirect:
        return redirect
    profile = await ctx.profiles.get()
    return _page(
        "Profile",
        _nav() + "<h1>Profile settings</h1>"
        f"<dl><dt>Email</dt><dd>{html.escape(profile.email or '')}</dd>"
        f"<dt>Name</dt><dd>{html.escape(profile.name)}</dd>"
        f"<dt>Timezone</dt><dd>{html.escape(profile.timezone)}</dd></dl>",
    )
