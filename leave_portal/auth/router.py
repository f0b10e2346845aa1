"""Auth routers — Google sign-in, current session, sign-out.

``router`` serves the JSON API under ``/api/v1/auth``; ``pages_router``
serves the browser flow (consent redirect, callback, sign-out form).
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.dependencies import extract_token, get_current_session
from leave_portal.auth.models import UserSession
from leave_portal.auth.schemas import (
    GoogleAuthRequest,
    SessionResponse,
    TokenResponse,
    UserInfo,
)
from leave_portal.auth.service import (
    build_authorize_url,
    create_session,
    find_or_create_user,
    revoke_session,
    validate_domain,
    verify_google_token,
)
from leave_portal.common.exceptions import ForbiddenException
from leave_portal.common.rate_limit import SIGN_IN_LIMIT, limiter
from leave_portal.config import settings
from leave_portal.database import get_db
from leave_portal.web.templating import render

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "oauth_state"

router = APIRouter(prefix="", tags=["auth"])
pages_router = APIRouter(prefix="/auth", tags=["pages"], include_in_schema=False)


def _client_info(request: Request) -> tuple[Optional[str], Optional[str]]:
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


# ── POST /google — OAuth code → token ───────────────────────────────

@router.post("/google", response_model=TokenResponse)
@limiter.limit(SIGN_IN_LIMIT)
async def google_auth(
    request: Request,
    body: GoogleAuthRequest,
    db: AsyncSession = Depends(get_db),
):
    google_info = await verify_google_token(body.code, body.redirect_uri)
    validate_domain(google_info["email"])
    user = await find_or_create_user(db, google_info)

    ip, user_agent = _client_info(request)
    access_token, expires_in = await create_session(db, user, ip, user_agent)

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=UserInfo.model_validate(user),
    )


# ── GET /session — Current session ──────────────────────────────────

@router.get("/session", response_model=SessionResponse)
async def current_session(session: UserSession = Depends(get_current_session)):
    return SessionResponse(
        user=UserInfo.model_validate(session.user),
        expires_at=session.expires_at,
    )


# ── POST /logout — Revoke current session ──────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, extract_token(request))
    return {"message": "Logged out successfully"}


# ═════════════════════════════════════════════════════════════════════
# Browser sign-in flow
# ═════════════════════════════════════════════════════════════════════


@pages_router.get("/login")
async def login(request: Request):
    """Send the browser to Google's consent screen."""
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(build_authorize_url(state), status_code=303)
    response.set_cookie(
        OAUTH_STATE_COOKIE, state, max_age=600, httponly=True,
        secure=settings.SESSION_COOKIE_SECURE, samesite="lax",
    )
    return response


@pages_router.get("/callback")
@limiter.limit(SIGN_IN_LIMIT)
async def callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Finish the OAuth round-trip, open a session and land on the dashboard."""
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if error or not code:
        return render(
            request, "signin.html",
            {"error": "Sign-in was cancelled. Please try again."},
            status_code=400,
        )
    if not expected_state or state != expected_state:
        logger.info("Rejected OAuth callback with mismatched state")
        return render(
            request, "signin.html",
            {"error": "Sign-in session expired. Please try again."},
            status_code=400,
        )

    try:
        google_info = await verify_google_token(code)
        validate_domain(google_info["email"])
        user = await find_or_create_user(db, google_info)
    except ForbiddenException as exc:
        logger.info("Sign-in refused: %s", exc.detail)
        return render(request, "signin.html", {"error": exc.detail}, status_code=403)

    ip, user_agent = _client_info(request)
    access_token, expires_in = await create_session(db, user, ip, user_agent)

    response = RedirectResponse("/dashboard", status_code=303)
    _set_session_cookie(response, access_token, expires_in)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@pages_router.post("/signout")
async def signout(request: Request, db: AsyncSession = Depends(get_db)):
    """Revoke the browser session and return to the sign-in page."""
    token = extract_token(request)
    if token:
        await revoke_session(db, token)
    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response
