"""In-memory sliding-window rate limiting.

Counts live in process memory: a restart resets them and every worker
process keeps its own. That looseness is accepted for the expected load.
"""

from __future__ import annotations

import asyncio
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional

from ..core.log import LOGGER
from .errors import RateLimited

SWEEP_INTERVAL_SECONDS = 5 * 60
MAX_IDLE_SECONDS = 60 * 60


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_seconds: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float


RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "nominations": RateLimitConfig(max_requests=10, window_seconds=60 * 60),
    "votes": RateLimitConfig(max_requests=50, window_seconds=60 * 60),
    "reads": RateLimitConfig(max_requests=100, window_seconds=60),
}


class RateLimiter:
    """Per-identifier request timestamps within a trailing window.

    Synchronous handlers run in a thread pool, so every read-modify-write of
    the timestamp store happens under one lock.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
        max_idle: float = MAX_IDLE_SECONDS,
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._max_idle = max_idle
        self._events: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._events)

    def now(self) -> float:
        return self._clock()

    def check(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Record a request for ``identifier`` if it fits in the window."""

        with self._lock:
            now = self._clock()
            q = self._events.setdefault(identifier, deque())
            self._prune(q, now - config.window_seconds)

            allowed = len(q) < config.max_requests
            if allowed:
                q.append(now)

            return self._result(allowed, q, now, config)

    def status(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Report the current budget without recording a request."""

        with self._lock:
            now = self._clock()
            window_start = now - config.window_seconds
            retained = deque(ts for ts in self._events.get(identifier, ()) if ts > window_start)
            return self._result(len(retained) < config.max_requests, retained, now, config)

    def sweep(self, now: Optional[float] = None) -> int:
        """Forget identifiers with no activity inside ``max_idle``."""

        with self._lock:
            now = self._clock() if now is None else now
            stale = [
                key
                for key, q in self._events.items()
                if not q or now - q[0] > self._max_idle
            ]
            for key in stale:
                del self._events[key]
        if stale:
            LOGGER.debug(f"Rate limiter swept {len(stale)} idle identifiers")
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._events.clear()

    def start(self) -> None:
        """Launch the periodic sweep on the running event loop."""

        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def shutdown(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    @staticmethod
    def _prune(q: Deque[float], window_start: float) -> None:
        while q and q[0] <= window_start:
            q.popleft()

    @staticmethod
    def _result(
        allowed: bool, q: Deque[float], now: float, config: RateLimitConfig
    ) -> RateLimitResult:
        remaining = max(0, config.max_requests - len(q))
        reset_at = q[0] + config.window_seconds if q else now + config.window_seconds
        return RateLimitResult(allowed=allowed, remaining=remaining, reset_at=reset_at)


def _identifier(category: str, user_id: str) -> str:
    return f"{category}:{user_id}"


def retry_after_seconds(reset_at: float, now: Optional[float] = None) -> int:
    """Whole seconds a client should wait, never less than one."""

    now = time.time() if now is None else now
    return max(1, math.ceil(reset_at - now))


def check_rate_limit(limiter: RateLimiter, user_id: str, category: str) -> RateLimitResult:
    """Count a request against ``category`` for ``user_id``.

    Raises ``RateLimited`` once the budget is spent.
    """

    config = RATE_LIMITS[category]
    result = limiter.check(_identifier(category, user_id), config)
    if not result.allowed:
        wait = retry_after_seconds(result.reset_at, limiter.now())
        LOGGER.warning(f"Rate limit hit for {category}:{user_id}, resets in {wait}s")
        raise RateLimited(
            f"Rate limit exceeded. Try again in {wait} seconds.",
            reset_at=result.reset_at,
            retry_after=wait,
        )
    return result


def get_rate_limit_status(limiter: RateLimiter, user_id: str, category: str) -> RateLimitResult:
    return limiter.status(_identifier(category, user_id), RATE_LIMITS[category])


__all__ = [
    "RATE_LIMITS",
    "RateLimitConfig",
    "RateLimitResult",
    "RateLimiter",
    "check_rate_limit",
    "get_rate_limit_status",
    "retry_after_seconds",
]
