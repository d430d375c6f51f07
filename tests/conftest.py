"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (auth, profiles, leave, dashboard, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

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

from backend.common.constants import LeaveStatus, UserRole
from backend.common.dates import inclusive_days
from backend.config import settings
from backend.database import Base, get_db
from backend.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (Profile ↔ LeaveRequest / LeaveBalance)
import backend.profiles.models  # noqa: F401
import backend.leave.models  # noqa: F401

from backend.leave.models import LeaveBalance, LeaveRequest
from backend.profiles.models import Profile

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


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


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and uuid_generate_v4() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
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
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from backend.common.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def _email_unconfigured(monkeypatch):
    """Tests start with no email credentials; opt in per test."""
    monkeypatch.setattr(settings, "RESEND_API_KEY", "")
    monkeypatch.setattr(settings, "RESEND_FROM_EMAIL", "")


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

def _make_profile(
    *,
    name: str = "Budi Santoso",
    id_pjlp: Optional[str] = None,
    email: Optional[str] = "budi@example.id",
    role: UserRole = UserRole.member,
    phone: Optional[str] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        role=role,
        name=name,
        id_pjlp=id_pjlp or f"PJLP-{uuid.uuid4().hex[:6].upper()}",
        email=email,
        phone=phone,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def _seed_profile(db: AsyncSession, **kwargs) -> Profile:
    profile = Profile(**_make_profile(**kwargs))
    db.add(profile)
    await db.commit()
    return profile


async def _seed_balance(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    year: int,
    total_days: int = 12,
    used_days: int = 0,
) -> LeaveBalance:
    bal = LeaveBalance(
        id=uuid.uuid4(),
        user_id=user_id,
        year=year,
        total_days=total_days,
        used_days=used_days,
        updated_at=datetime.now(timezone.utc),
    )
    db.add(bal)
    await db.commit()
    return bal


async def _seed_request(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    start_date: date,
    end_date: Optional[date] = None,
    status: LeaveStatus = LeaveStatus.pending,
    title: str = "Cuti keluarga",
    created_at: Optional[datetime] = None,
    is_read_by_user: bool = True,
) -> LeaveRequest:
    end_date = end_date or start_date
    created = created_at or datetime.now(timezone.utc)
    req = LeaveRequest(
        id=uuid.uuid4(),
        user_id=user_id,
        title=title,
        reason="Menghadiri acara keluarga di luar kota.",
        start_date=start_date,
        end_date=end_date,
        duration=inclusive_days(start_date, end_date),
        status=status,
        is_read_by_user=is_read_by_user,
        created_at=created,
        updated_at=created,
    )
    db.add(req)
    await db.commit()
    return req


@pytest.fixture
async def member(db) -> Profile:
    """Insert a member (role 'anggota')."""
    return await _seed_profile(db)


@pytest.fixture
async def admin(db) -> Profile:
    """Insert an admin."""
    return await _seed_profile(
        db, name="Admin Cuti", email="admin@example.id", role=UserRole.admin,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    expired: bool = False,
    audience: Optional[str] = None,
) -> str:
    """Generate an identity-provider style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(user_id),
        "aud": audience or settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def auth_headers(member) -> dict[str, str]:
    """Bearer headers for the member fixture."""
    return {"Authorization": f"Bearer {create_access_token(member.id)}"}


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    """Bearer headers for the admin fixture."""
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}
