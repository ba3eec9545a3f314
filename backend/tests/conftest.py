"""
Skeleton Backend - Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── test_settings: Settings built from explicit values (no .env lookup)
    ├── app:           Fresh FastAPI instance from create_app(test_settings)
    ├── test_client:   HTTPX AsyncClient talking to `app` in-process
    └── loopback:      Settings for real-socket tests (127.0.0.1, ephemeral port)
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings BEFORE any skeleton import builds the singleton
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CORS_ORIGINS"] = "*"
os.environ.pop("PORT", None)

from skeleton.config import Settings  # noqa: E402
from skeleton.main import create_app  # noqa: E402


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, log_level="WARNING")


@pytest.fixture
def app(test_settings):
    """A fresh application per test; tests may add their own routes to it."""
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def loopback():
    """Settings for tests that bind a real socket."""
    return Settings(_env_file=None, host="127.0.0.1", port=0, shutdown_timeout=2.0)
