"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text

from config.settings import settings
from src.sf_admin.api.pages import router as admin_pages_router
from src.sf_admin.api.router import router as admin_router
from src.sf_common.database import engine
from src.sf_common.errors import AppError, RateLimitError
from src.sf_common.response import error_response
from src.sf_gateway.api.router import router as auth_router
from src.sf_gateway.middleware.admin_guard import AdminGuardMiddleware
from src.sf_gateway.middleware.request_log import RequestLogMiddleware
from src.sf_gateway.ratelimit.sliding_window import SlidingWindowRateLimiter, run_sweeper


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, start limiter sweeper. Shutdown: stop sweeper, dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    sweeper = asyncio.create_task(
        run_sweeper(
            app.state.rate_limiter,
            interval_seconds=settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS,
            retention_ms=settings.RATE_LIMIT_RETENTION_MS,
        )
    )
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)
app.state.rate_limiter = SlidingWindowRateLimiter()

# Starlette runs the last-added middleware first: log, then guard
app.add_middleware(AdminGuardMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError) -> PlainTextResponse:
    return PlainTextResponse(
        exc.message,
        status_code=exc.http_status,
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(admin_pages_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
