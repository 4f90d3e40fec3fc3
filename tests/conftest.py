"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET at import time; unit tests never reach a database.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.mm_ledger.domain.cache import ReadCache


@pytest.fixture
def read_cache() -> ReadCache:
    return ReadCache()


@pytest.fixture
async def client(read_cache: ReadCache) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints (lifespan is not run)."""
    app.state.read_cache = read_cache
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
