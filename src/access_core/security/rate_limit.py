"""
access_core.security.rate_limit

Fixed-window rate limiting for the security gate.

Responsibilities:
- Count requests per caller inside clock-aligned fixed windows.
- Keep counters in Redis (`INCR` + `EXPIRE` on a per-window key) so every
  worker enforces one shared budget; an in-process store backs dev/test.
- Exempt admin-panel style prefixes that legitimately fan out many requests.
- Report remaining budget and retry-after for the HTTP boundary.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from access_core.observability.logging import get_logger

log = get_logger(__name__)

KEY_PREFIX = "ratelimit"


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int | None = None


class WindowStore(Protocol):
    async def hit(self, identifier: str, *, window_start: int, window: int) -> int:
        """Count one request in the given window and return the new total."""
        ...


class RedisWindowStore:
    """
    One key per (identifier, window); the key expires with its window, so
    idle callers leave nothing behind.
    """

    def __init__(self, client: redis.Redis, *, prefix: str = KEY_PREFIX) -> None:
        self._client = client
        self._prefix = prefix

    def key_for(self, identifier: str, window_start: int) -> str:
        return f"{self._prefix}:{identifier}:{window_start}"

    async def hit(self, identifier: str, *, window_start: int, window: int) -> int:
        key = self.key_for(identifier, window_start)
        async with self._client.pipeline() as pipe:
            pipe.incr(key)
            pipe.expire(key, window)
            count, _ = await pipe.execute()
        return int(count)


class MemoryWindowStore:
    """
    Single-process store for dev/test.

    Windows are clock-aligned, so every live counter belongs to the current
    window; counters from the previous window are dropped as soon as a new
    one starts.
    """

    def __init__(self) -> None:
        self._current: int | None = None
        self._counts: dict[str, int] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._counts)

    async def hit(self, identifier: str, *, window_start: int, window: int) -> int:
        async with self._lock:
            if window_start != self._current:
                self._counts.clear()
                self._current = window_start
            count = self._counts.get(identifier, 0) + 1
            self._counts[identifier] = count
        return count


class FixedWindowRateLimiter:
    def __init__(
        self,
        *,
        store: WindowStore,
        limit: int,
        window_seconds: int,
        exempt_prefixes: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._limit = limit
        self._window = window_seconds
        self._exempt = tuple(exempt_prefixes)
        self._clock = clock

    def is_exempt(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self._exempt)

    async def check(self, identifier: str, *, path: str = "") -> RateLimitResult:
        if self.is_exempt(path):
            return RateLimitResult(allowed=True, limit=self._limit, remaining=self._limit)

        now = int(self._clock())
        elapsed = now % self._window
        window_start = now - elapsed

        try:
            count = await self._store.hit(identifier, window_start=window_start, window=self._window)
        except RedisError as e:
            # Fail open: an unavailable counter store must not take the API down.
            log.error("rate_limit_store_unavailable", error=str(e))
            return RateLimitResult(allowed=True, limit=self._limit, remaining=self._limit)

        if count > self._limit:
            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=0,
                retry_after=max(1, self._window - elapsed),
            )
        return RateLimitResult(allowed=True, limit=self._limit, remaining=self._limit - count)


# --- Module Notes -----------------------------------------------------------
# `Settings.redis_url` selects the Redis store; without it each worker keeps
# its own in-memory budget.
