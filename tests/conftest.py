"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import hashlib
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_portal.common.constants import LeaveStatus, LeaveType
from leave_portal.config import settings
from leave_portal.database import Base, get_db
from leave_portal.main import create_app

# Import model modules so every table is registered on Base.metadata
import leave_portal.auth.models  # noqa: F401
import leave_portal.leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT ────────────────

from sqlalchemy.dialects.postgresql import INET, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(INET, "sqlite")
def _inet_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register uuid_generate_v4() as a SQLite custom function."""
    dbapi_conn.create_function(
        "uuid_generate_v4", 0, lambda: str(uuid.uuid4()),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Clear slowapi's in-memory counters so sign-in tests don't trip each other."""
    from leave_portal.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    email: str = "test.user@dhl.com",
    display_name: str = "Test User",
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        email=email,
        display_name=display_name,
        google_id=f"google-{uuid.uuid4().hex[:12]}",
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
    )


def _make_leave_request(
    *,
    employee_name: str = "Alice Smith",
    staff_id: str = "DHL001",
    leave_type: LeaveType = LeaveType.annual,
    start_date: date = date(2025, 5, 25),
    end_date: date = date(2025, 5, 30),
    status: LeaveStatus = LeaveStatus.pending,
    created_at: datetime | None = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_name=employee_name,
        staff_id=staff_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        status=status,
        created_at=created_at or datetime.now(timezone.utc),
    )


async def seed_leave_request(db: AsyncSession, **kwargs) -> dict:
    """Insert a leave request, commit, and return its data dict."""
    from leave_portal.leave.models import LeaveRequest

    data = _make_leave_request(**kwargs)
    db.add(LeaveRequest(**data))
    await db.commit()
    return data


@pytest.fixture
async def test_user(db) -> dict:
    """Insert an active staff user and return its data dict."""
    from leave_portal.auth.models import StaffUser

    data = _make_user()
    db.add(StaffUser(**data))
    await db.commit()
    return data


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(user_id: uuid.UUID, expired: bool = False) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def persist_session(
    db: AsyncSession,
    user_id: uuid.UUID,
    token: str,
    *,
    expires_at: datetime | None = None,
    is_revoked: bool = False,
) -> None:
    from leave_portal.auth.models import UserSession

    db.add(
        UserSession(
            id=uuid.uuid4(),
            user_id=user_id,
            token_hash=hashlib.sha256(token.encode()).hexdigest(),
            expires_at=expires_at
            or datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
            is_revoked=is_revoked,
            created_at=datetime.now(timezone.utc),
        )
    )
    await db.commit()


@pytest.fixture
async def session_token(db, test_user) -> str:
    """A valid access token with its session persisted in the DB."""
    token = create_access_token(test_user["id"])
    await persist_session(db, test_user["id"], token)
    return token


@pytest.fixture
async def auth_headers(session_token) -> dict[str, str]:
    """Return Bearer auth headers for the signed-in test user."""
    return {"Authorization": f"Bearer {session_token}"}


@pytest.fixture
async def signed_in_client(client, session_token) -> AsyncClient:
    """The test client carrying the browser session cookie."""
    client.cookies.set(settings.SESSION_COOKIE_NAME, session_token)
    return client


@pytest.fixture
def mock_google_oauth():
    """Patch verify_google_token to return a fake DHL user."""

    def _mock(email: str = "test.user@dhl.com", name: str = "Test User"):
        google_info = {
            "email": email,
            "name": name,
            "google_id": f"google-{uuid.uuid4().hex[:12]}",
        }
        return patch(
            "leave_portal.auth.router.verify_google_token",
            new_callable=AsyncMock,
            return_value=google_info,
        )

    return _mock
