"""Shared fixtures: a throwaway SQLite database and a TestClient with mocked Redis.

Environment must be set before any analytics module is imported, since
settings and the engine are created at import time.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

_DB_DIR = tempfile.mkdtemp(prefix="analytics-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["ANALYTICS_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from analytics.database import async_session_factory, engine
from analytics.main import app
from analytics.models import Base

BLOG_UA = "Mozilla/5.0 (X11; Linux x86_64) Gecko/20100101 Firefox/130.0"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    asyncio.run(_reset_schema())
    yield


@pytest.fixture
def in_session():
    """Run `fn(session, *args)` against the test database and return its result."""

    def _run(fn, *args):
        async def _go():
            async with async_session_factory() as session:
                return await fn(session, *args)

        return asyncio.run(_go())

    return _run


@pytest.fixture
def mock_redis():
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def healthy_worker():
    worker = MagicMock()
    worker.done.return_value = False
    worker.cancelled.return_value = False
    return worker


@pytest.fixture
def client(mock_redis, healthy_worker):
    """Test client; lifespan is not started so app.state is filled with mocks."""
    app.state.redis = mock_redis
    app.state.sweep_worker_task = healthy_worker
    return TestClient(app, headers={"User-Agent": BLOG_UA})
