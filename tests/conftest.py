"""
Blogwrite Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Integration tests build a fresh app per test on a temporary SQLite file
       (aiosqlite) and drive it with an httpx AsyncClient over ASGITransport.
       Unit tests use an AsyncMock session.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── settings:         Settings pointing at tmp_path/test.db
    ├── app:              create_app(settings) with tables created
    ├── test_client:      HTTPX AsyncClient bound to `app`
    ├── register_user:    factory → (user_json, auth_headers)
    └── mock_db_session:  AsyncMock standing in for AsyncSession
"""

import os
from typing import Any, Awaitable, Callable, Dict, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before blogwrite.main is imported: it builds a module-level app from the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["LOG_LEVEL"] = "WARNING"

from blogwrite.config import Settings  # noqa: E402
from blogwrite.main import create_app  # noqa: E402


RegisterUser = Callable[..., Awaitable[Tuple[Dict[str, Any], Dict[str, str]]]]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key="test-secret-not-real",
        argon2_time_cost=1,
        argon2_memory_cost=1024,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    """
    A fully wired application on an empty database.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client) -> RegisterUser:
    """
    Factory fixture: registers a user and returns (user, headers).

    Usage:
        user, headers = await register_user("alice")
        await test_client.post("/api/blogs", json=..., headers=headers)
    """

    async def _register(username: str = "alice", password: str = "secret123"):
        response = await test_client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_blog(mock_db_session):
            mock_db_session.execute.return_value.rowcount = 0
            with pytest.raises(NotFoundError):
                await blog_service.get_blog(mock_db_session, str(uuid4()))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.expunge = MagicMock()
    return session
