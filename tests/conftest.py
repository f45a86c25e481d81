"""Pytest configuration: in-memory database, API client and a registered user."""

import os

# Point the settings at SQLite BEFORE anything imports components.core.config
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from components.core.database import Base, enable_sqlite_foreign_keys
from components.core.init_db import get_db
from components.user.repository import UserRepository
from components.user.schemas import UserCreate
from restapi.router import create_app

app = create_app()


@pytest.fixture
async def engine():
    """Fresh in-memory database shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    """Create async test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def user(db_session):
    """Create a user for repository tests."""
    return await UserRepository(db_session).create(UserCreate(login="alice", password="secret123"))


@pytest.fixture
async def client(session_maker):
    """API client talking to the app with the test database."""
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def auth_headers(client):
    """Register a user through the API and return its bearer header."""
    response = await client.post("/auth/register", json={"login": "apiuser", "password": "secret123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
