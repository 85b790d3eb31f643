"""In-process sliding-window rate limiter.

Each client identifier maps to the list of its request timestamps (epoch
milliseconds). ``check`` prunes the list to the trailing window, records the
current request and reports whether the caller is now over quota. A limit of
10 therefore admits 10 requests per window and rejects the 11th.

State lives in one process only: restarts reset every counter and separate
workers keep separate counts. The limiter is created once per application
(see ``src.main``) and handed to request handlers through ``app.state``;
tests build their own instances with a fake clock.

A background sweeper drops identifiers idle for longer than the retention
window so the map does not grow with every address ever seen.
"""

import asyncio
import logging
import threading
from collections.abc import Callable

from src.sf_common.datetime_utils import now_ms

logger = logging.getLogger("sf.ratelimit")

DEFAULT_RETENTION_MS = 60 * 60 * 1000  # 1 hour
DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60


class SlidingWindowRateLimiter:
    """Per-identifier sliding-window request counter."""

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._windows: dict[str, list[int]] = {}
        # check() and sweep() are both read-modify-write on the same map
        self._lock = threading.Lock()

    def check(self, identifier: str, limit: int, window_ms: int) -> bool:
        """Record a request for *identifier*; return True if it is over *limit*.

        Every call counts, including ones that end up rejected, so a client
        hammering a limited endpoint stays limited until it backs off for a
        full window.
        """
        with self._lock:
            now = self._clock()
            recent = [ts for ts in self._windows.get(identifier, ()) if now - ts < window_ms]
            recent.append(now)
            self._windows[identifier] = recent
            return len(recent) > limit

    def sweep(self, retention_ms: int = DEFAULT_RETENTION_MS) -> int:
        """Prune every window to *retention_ms*; return how many identifiers were dropped."""
        removed = 0
        with self._lock:
            now = self._clock()
            for identifier in list(self._windows):
                recent = [ts for ts in self._windows[identifier] if now - ts < retention_ms]
                if recent:
                    self._windows[identifier] = recent
                else:
                    del self._windows[identifier]
                    removed += 1
        return removed

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self, identifier: str | None = None) -> None:
        """Forget one identifier, or everything when *identifier* is None."""
        with self._lock:
            if identifier is None:
                self._windows.clear()
            else:
                self._windows.pop(identifier, None)


async def run_sweeper(
    limiter: SlidingWindowRateLimiter,
    interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    retention_ms: int = DEFAULT_RETENTION_MS,
) -> None:
    """Sweep *limiter* every *interval_seconds* until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.sweep(retention_ms)
        logger.debug(
            "rate limiter sweep removed %d identifiers (%d tracked)",
            removed,
            limiter.tracked_identifiers(),
        )
