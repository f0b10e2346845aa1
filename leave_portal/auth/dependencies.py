"""Auth dependencies — session lookup for API and page routes."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from leave_portal.auth.models import StaffUser, UserSession
from leave_portal.auth.service import resolve_session
from leave_portal.config import settings
from leave_portal.database import get_db


def extract_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


# ── Core dependencies ───────────────────────────────────────────────

async def get_current_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserSession:
    """Return the live session for this request or raise 401."""
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not signed in.")
    return await resolve_session(db, token)


async def get_current_user(
    session: UserSession = Depends(get_current_session),
) -> StaffUser:
    """Return the signed-in staff user or raise 401."""
    return session.user


async def get_optional_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[UserSession]:
    """Like ``get_current_session`` but yields ``None`` when signed out.

    Page routes use this to redirect instead of answering 401.
    """
    token = extract_token(request)
    if not token:
        return None
    try:
        return await resolve_session(db, token)
    except HTTPException:
        return None
