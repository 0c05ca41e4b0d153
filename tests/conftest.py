"""
NoteCache - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own temporary cache directory, so notes never
       leak between tests and nothing touches the real filesystem layout.

Fixtures:
    ├── temp_storage:  fresh temporary cache directory (Path)
    ├── settings:      Settings pointing at temp_storage
    ├── store:         NoteStore over temp_storage
    ├── app:           FastAPI app built by create_app(settings)
    └── test_client:   HTTPX AsyncClient talking to the app in-process
"""

import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Keep a developer's NOTECACHE_* environment or .env out of the tests
for _key in [k for k in os.environ if k.startswith("NOTECACHE_")]:
    del os.environ[_key]
os.environ["NOTECACHE_LOG_LEVEL"] = "WARNING"

from notecache.config import Settings  # noqa: E402
from notecache.main import create_app  # noqa: E402
from notecache.services.note_store import NoteStore  # noqa: E402


@pytest.fixture
def temp_storage(tmp_path):
    """A cache directory that does not exist yet; the store creates it."""
    return tmp_path / "cache"


@pytest.fixture
def settings(temp_storage):
    return Settings(cache_dir=temp_storage, _env_file=None)


@pytest.fixture
def store(temp_storage):
    return NoteStore(temp_storage)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/notes")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
