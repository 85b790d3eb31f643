"""Rate limiting for sensitive auth endpoints.

Quotas (per client identifier, sliding one-minute window):
  - Registration:                  10 req/min
  - Password-reset request:        15 req/min
  - Credential sign-in:             5 req/min
  - Password-reset confirmation:    5 req/min

Usage in a router:
    @router.post("/register", dependencies=[Depends(rate_limit(10, 60_000))])

The dependency runs before the request body is validated and before any
database access. Over-quota callers get RateLimitError, rendered by the app
as a plain-text 429 with a Retry-After header.

Known limitation: callers with no forwarded address and no socket peer share
the single "unknown" bucket.
"""

import logging
import math
from collections.abc import Awaitable, Callable

from starlette.requests import Request

from src.sf_common.errors import RateLimitError
from src.sf_gateway.ratelimit.sliding_window import SlidingWindowRateLimiter

logger = logging.getLogger("sf.ratelimit")

UNKNOWN_CLIENT = "unknown"

REGISTER_LIMIT = (10, 60_000)
PASSWORD_RESET_REQUEST_LIMIT = (15, 60_000)
LOGIN_LIMIT = (5, 60_000)
PASSWORD_RESET_LIMIT = (5, 60_000)


def client_identifier(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer, else "unknown"."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """The limiter owned by the running application."""
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    return limiter


def rate_limit(limit: int, window_ms: int) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency enforcing *limit* requests per *window_ms*."""
    if limit <= 0 or window_ms <= 0:
        raise ValueError(f"limit and window_ms must be positive, got {limit}/{window_ms}")
    retry_after = max(1, math.ceil(window_ms / 1000))

    async def _check_rate_limit(request: Request) -> None:
        identifier = client_identifier(request)
        if get_rate_limiter(request).check(identifier, limit, window_ms):
            logger.warning(
                "Rate limit exceeded for %s on %s (%d per %dms)",
                identifier,
                request.url.path,
                limit,
                window_ms,
            )
            raise RateLimitError(retry_after_seconds=retry_after)

    return _check_rate_limit
