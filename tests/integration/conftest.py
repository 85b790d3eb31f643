"""Integration-test fixtures.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the whole session. Tests are skipped when the database is unreachable.

Pre-condition: PostgreSQL up and `alembic upgrade head` applied.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.sf_common.database import engine
from src.sf_gateway.ratelimit.sliding_window import SlidingWindowRateLimiter


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def database_ready() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM users LIMIT 1"))
    except Exception as exc:  # noqa: BLE001 -- any failure means "no test database"
        pytest.skip(f"integration database unavailable: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(database_ready: None) -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    app.state.rate_limiter = SlidingWindowRateLimiter()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def _fresh_rate_limits() -> None:
    """Every request here comes from 127.0.0.1; start each test with clean quotas."""
    limiter = getattr(app.state, "rate_limiter", None)
    if limiter is not None:
        limiter.reset()
