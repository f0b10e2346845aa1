"""Auth service — Google OAuth exchange, JWT issue, session lifecycle."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leave_portal.auth.models import StaffUser, UserSession
from leave_portal.common.exceptions import ForbiddenException
from leave_portal.config import settings

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


# ── Google OAuth ────────────────────────────────────────────────────

def build_authorize_url(state: Optional[str] = None) -> str:
    """Return the Google consent-screen URL for the configured client."""
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": "openid email profile",
        "prompt": "select_account",
    }
    if state:
        params["state"] = state
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def verify_google_token(code: str, redirect_uri: Optional[str] = None) -> dict[str, Any]:
    """Exchange Google authorization code for user info.

    Returns dict with keys: email, name, google_id.
    Network failures and malformed Google responses raise ForbiddenException.
    """
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            token_resp = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": settings.GOOGLE_CLIENT_ID,
                    "client_secret": settings.GOOGLE_CLIENT_SECRET,
                    "code": code,
                    "redirect_uri": redirect_uri or settings.GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
            )
            token_data = token_resp.json()
            if token_resp.status_code != 200 or "access_token" not in token_data:
                raise ForbiddenException(
                    detail=f"Google token exchange failed: {token_data.get('error_description', 'unknown error')}",
                )

            info_resp = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {token_data['access_token']}"},
            )
            if info_resp.status_code != 200:
                raise ForbiddenException(detail="Failed to fetch Google user info.")

            info = info_resp.json()
            return {
                "email": info["email"],
                "name": info.get("name", ""),
                "google_id": info["id"],
            }
    except httpx.HTTPError as exc:
        logger.warning("Google sign-in request failed: %s", exc)
        raise ForbiddenException(detail="Could not reach Google. Please try again.")
    except (KeyError, ValueError) as exc:
        logger.warning("Unexpected Google sign-in response: %r", exc)
        raise ForbiddenException(detail="Google returned an incomplete profile. Please try again.")


def validate_domain(email: str) -> None:
    """Ensure the email belongs to the allowed domain."""
    if not email.lower().endswith(f"@{settings.ALLOWED_DOMAIN}"):
        raise ForbiddenException(
            detail=f"Only @{settings.ALLOWED_DOMAIN} accounts are permitted.",
        )


# ── Staff users ─────────────────────────────────────────────────────

async def find_or_create_user(db: AsyncSession, google_info: dict[str, Any]) -> StaffUser:
    """Return the staff user for this Google account, creating it on first sign-in."""
    email = google_info["email"].lower()
    result = await db.execute(select(StaffUser).where(StaffUser.email == email))
    user = result.scalars().first()

    if user is None:
        user = StaffUser(
            email=email,
            display_name=google_info.get("name") or None,
            google_id=google_info.get("google_id"),
            is_active=True,
        )
        db.add(user)
        await db.flush()
        logger.info("Created staff user %s", email)
    elif not user.is_active:
        raise ForbiddenException(detail="This account has been deactivated.")
    elif not user.google_id:
        user.google_id = google_info.get("google_id")
        await db.flush()

    return user


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _create_access_token(user_id: uuid.UUID) -> tuple[str, datetime]:
    """Return (encoded_jwt, expires_at)."""
    expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


# ── Session management ──────────────────────────────────────────────

async def create_session(
    db: AsyncSession,
    user: StaffUser,
    ip: Optional[str],
    user_agent: Optional[str],
) -> tuple[str, int]:
    """Issue a JWT and persist its session.  Returns (access_token, expires_in)."""
    access_token, expires_at = _create_access_token(user.id)

    db.add(
        UserSession(
            user_id=user.id,
            token_hash=hash_token(access_token),
            ip_address=ip,
            user_agent=user_agent,
            expires_at=expires_at,
            is_revoked=False,
        )
    )
    await db.flush()
    logger.info("Signed in %s", user.email)

    return access_token, settings.JWT_EXPIRY_HOURS * 3600


async def resolve_session(db: AsyncSession, token: str) -> UserSession:
    """Validate *token* and return its live session with the user loaded.

    Raises 401 when the JWT is invalid or expired, or when the session row
    is missing, revoked or past its expiry.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    result = await db.execute(
        select(UserSession)
        .where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(timezone.utc),
        )
        .options(selectinload(UserSession.user)),
    )
    session = result.scalars().first()
    if session is None:
        raise HTTPException(status_code=401, detail="Session invalid or expired.")

    if not session.user.is_active:
        raise HTTPException(status_code=401, detail="User account is inactive.")

    return session


async def revoke_session(db: AsyncSession, token: str) -> None:
    """Mark the session for *token* as revoked; unknown tokens are ignored."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == hash_token(token)),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()
        logger.info("Revoked session %s", session.id)
