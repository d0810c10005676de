"""Shared test fixtures.

Tests run against a fresh in-memory SQLite database per test (via
aiosqlite) with tables created from the ORM metadata. Redis is not
configured, so rate limiting and leaderboard caching are pass-through.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

os.environ["IHUB_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["IHUB_REDIS_URL"] = ""
os.environ["IHUB_LOG_FORMAT"] = "console"
os.environ["IHUB_JWT_SECRET"] = "test-secret-key-for-hs256-signing-only"

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.config import get_settings
from ihub.database import close_db, get_engine, get_session, init_db
from ihub.db.base import Base
from ihub.db.models import Shipment, TourPackage, TravelBooking, User
from ihub.gamification.seed import DEFAULT_INDUSTRIES, seed_badges, seed_industries

get_settings.cache_clear()

INDUSTRY_IDS = {i["name"]: i["id"] for i in DEFAULT_INDUSTRIES}


async def _create_schema() -> None:
    settings = get_settings()
    await init_db(settings.database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Direct database session on an empty schema."""
    await _create_schema()
    async for session in get_session():
        yield session
        await session.close()
        break
    await close_db()


@pytest_asyncio.fixture
async def seeded_db(db_session: AsyncSession) -> AsyncSession:
    """DB session with industries and the badge catalog seeded."""
    await seed_industries(db_session)
    await seed_badges(db_session)
    return db_session


async def make_user(
    db: AsyncSession,
    industry: str | None = "Tour Management",
    *,
    email: str = "operator@example.com",
    profile_complete: bool = True,
) -> User:
    """Insert a user affiliated with ``industry`` (by name)."""
    user = User(
        email=email,
        first_name="Ada" if profile_complete else None,
        last_name="Lovelace" if profile_complete else None,
        phone="+15550100" if profile_complete else None,
        industry_id=INDUSTRY_IDS.get(industry) if industry else None,
    )
    db.add(user)
    await db.commit()
    return user


async def add_packages(db: AsyncSession, user_id: str, count: int, created_at: datetime | None = None) -> None:
    """Persist ``count`` tour packages, as the tour routes would."""
    for i in range(count):
        db.add(TourPackage(
            user_id=user_id,
            name=f"Package {i}",
            created_at=created_at or datetime.now(timezone.utc),
        ))
    await db.commit()


async def add_bookings(db: AsyncSession, user_id: str, count: int) -> None:
    for _ in range(count):
        db.add(TravelBooking(user_id=user_id, type="flight"))
    await db.commit()


async def add_shipments(db: AsyncSession, user_id: str, count: int, created_at: datetime | None = None) -> None:
    for i in range(count):
        db.add(Shipment(
            user_id=user_id,
            tracking_number=f"TRK{i:05d}",
            created_at=created_at or datetime.now(timezone.utc),
        ))
    await db.commit()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over a fresh, seeded database."""
    from ihub.main import create_app

    app = create_app()
    await _create_schema()
    async for session in get_session():
        await seed_industries(session)
        await seed_badges(session)
        await session.close()
        break

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


@pytest_asyncio.fixture
async def app_db(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """Session on the same database the ``client`` app uses."""
    async for session in get_session():
        yield session
        await session.close()
        break


@pytest_asyncio.fixture
async def authed_user(client: AsyncClient, app_db: AsyncSession) -> User:
    """Tour operator with a complete profile; the client carries their token."""
    from ihub.auth.jwt import create_access_token

    user = await make_user(app_db, "Tour Management")
    client.headers["Authorization"] = f"Bearer {create_access_token(user.id, user.email, user.industry_id)}"
    return user
