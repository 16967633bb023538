"""
Shared test fixtures.

The environment is prepared before anything from app/ is imported: settings
are read once at import time, so the database, network probes and per-IP
rate limits have to be configured here.
"""

import os
import tempfile
import uuid

_TEST_DIR = tempfile.mkdtemp(prefix="url-shortener-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["REACHABILITY_CHECK_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SAFE_BROWSING_API_KEY"] = ""
os.environ["BASE_URL"] = "http://sho.rt"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db.session import async_session_maker, init_models  # noqa: E402
from app.main import app  # noqa: E402


class FakeClock:
    """Settable epoch-second clock for the redirection limiter."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def unique_url():
    """A fresh target URL per test so hash keys never clash between tests."""
    return f"https://example.com/page/{uuid.uuid4().hex}"


@pytest_asyncio.fixture
async def session():
    await init_models()
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
