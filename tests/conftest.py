"""
SPA Images Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is pointed at a throwaway SQLite file BEFORE any
       spa_images module is imported, so the module-level engine binds to it.

Fixtures:
    ├── mock_db_session: AsyncMock session for pure service unit tests
    ├── db_session:      real AsyncSession on a freshly created schema
    ├── valid_payload:   a payload that passes every validation rule
    └── test_client:     HTTPX AsyncClient wired to the app via ASGITransport
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_db_dir = tempfile.mkdtemp(prefix="spa_images_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CREATE_TABLES"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from spa_images.database import Base, async_session_factory, engine  # noqa: E402
from spa_images.models import image  # noqa: E402,F401


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = image
        result = await image_service.get_image(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """Creates the schema for one test and drops it afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """A real session on the test database, closed after the test."""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def valid_payload():
    return {
        "image_url": "https://example.com/cat.jpg",
        "description": "Un gatto",
        "rating": 4,
    }


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to the FastAPI app without a running server.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/images")
            assert response.status_code == 200
    """
    from spa_images.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
