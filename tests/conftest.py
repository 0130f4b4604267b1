"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (aiosqlite) with the
   schema created from the ORM models, so nothing leaks between tests.
2. The app's get_db dependency is overridden to yield that test's session.
3. Auth is NOT overridden: every request runs the real request authorizer,
   so tests exercise token issuance and verification end to end.

bcrypt rounds are lowered through the environment before the package is
imported; the minimum work factor keeps the suite fast.
"""

import os

os.environ.setdefault("TASKLIST_BCRYPT_ROUNDS", "4")
os.environ.setdefault(
    "TASKLIST_JWT_SECRET", "test-secret-that-is-long-enough-for-hs256-keys"
)

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tasklist.db.engine import get_db  # noqa: E402
from tasklist.db.models import Base  # noqa: E402
from tasklist.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a throwaway in-memory database."""
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client against the real app, with only get_db overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client, name="Ada", email=None, password="secret1"):
    """Register through the API and return (email, token)."""
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post(
        "/signup",
        json={
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password,
        },
    )
    assert r.status_code == 201, r.text
    return email, r.json()["auth_token"]


@pytest_asyncio.fixture()
async def auth_headers(client):
    _, token = await signup(client)
    return {"Authorization": f"Bearer {token}"}
