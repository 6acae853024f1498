"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server DB:

1. Each test gets its own sqlite+aiosqlite in-memory engine. StaticPool
   keeps one connection alive, so every session sees the same database.
2. The schema is created from Base.metadata, and the engine is disposed
   after the test, so all test data vanishes.
3. The app is built with create_app(test_settings), so the token codec
   uses a known secret and TTL, and get_db is overridden to hand out
   sessions from the test engine (one session per request, like prod).

bcrypt rounds are lowered for speed; hashes are still real bcrypt.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventkeeper.auth.context import AuthenticatedPrincipal
from eventkeeper.auth.jwt import TokenCodec
from eventkeeper.config import Settings
from eventkeeper.db.engine import get_db
from eventkeeper.db.models import Base
from eventkeeper.main import create_app

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"
TEST_DB_URL = "sqlite+aiosqlite://"
PASSWORD = "secure_password_123"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr("eventkeeper.auth.password.BCRYPT_ROUNDS", 4)


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        jwt_secret=TEST_SECRET,
        token_ttl_ms=3_600_000,
        environment="test",
        log_level="WARNING",
    )


@pytest.fixture()
def codec(test_settings) -> TokenCodec:
    return TokenCodec.from_settings(test_settings)


@pytest_asyncio.fixture()
async def session_factory():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for calling services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def app(test_settings, session_factory):
    app = create_app(test_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client against the app, with no credentials attached."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ─── Helpers ────────────────────────────────────────────


def unique_name(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


async def register_user(client, username: str, email: str = None, password: str = PASSWORD):
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


async def login_user(client, username: str, password: str = PASSWORD) -> dict:
    r = await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )
    assert r.status_code == 200, r.text
    return r.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def alice(client):
    """Registered + logged-in user. Returns the login response plus auth headers."""
    await register_user(client, "alice")
    body = await login_user(client, "alice")
    return {**body, "headers": bearer(body["token"])}


@pytest_asyncio.fixture()
async def bob(client):
    await register_user(client, "bob")
    body = await login_user(client, "bob")
    return {**body, "headers": bearer(body["token"])}


def as_principal(user) -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(principal_id=user.id, username=user.username)
