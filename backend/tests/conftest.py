"""
Chirpboard Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Unit tests get a mocked AsyncSession. API tests get a fresh app per
       test, built by create_app() over an in-memory SQLite database, and an
       HTTPX AsyncClient that talks to it through ASGITransport.

Fixture Hierarchy:
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── test_settings:   Settings for an isolated in-memory app
    ├── app:             connected app (tables created, disposed afterwards)
    └── test_client:     AsyncClient on https://test (secure cookies are sent)
"""

import os

# Must run before any chirpboard import: the module-level settings and the
# module-level app read the environment at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DB_CREATE_TABLES"] = "true"
os.environ["COOKIE_SECRET"] = "test-cookie-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from chirpboard.config import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "db_create_tables": True,
        "cookie_secret": "test-cookie-secret",
        "bcrypt_rounds": 4,
        "log_level": "WARNING",
        "rate_limit_requests": 1000,
    }
    values.update(overrides)
    return Settings(**values)


def query_result(value):
    """Mock of the object `await session.execute(...)` returns."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value = query_result(user)
        await content_service.post_entry(mock_db_session, "hi", "rob")
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=query_result(None))
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings():
    return make_settings()


@pytest_asyncio.fixture
async def app(test_settings):
    """
    Application with its database connected.

    ASGITransport does not run the lifespan, so the database is opened and
    disposed here.
    """
    from chirpboard.main import create_app

    application = create_app(test_settings)
    await application.state.database.connect()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client
