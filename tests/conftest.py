"""Shared test fixtures."""

import os

# Settings are read at import time; JWT_SECRET has no default
os.environ.setdefault("JWT_SECRET", "test-only-secret-not-for-production")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.sf_gateway.ratelimit.sliding_window import SlidingWindowRateLimiter
from tests.factories import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for the app, with a fresh rate limiter per test."""
    app.state.rate_limiter = SlidingWindowRateLimiter()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
