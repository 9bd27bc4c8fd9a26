"""
Rate Limit Stores - Fixed-window hit counters, in memory or in Redis.
"""

import asyncio
import math
import time
from typing import Callable, Dict, Optional, Tuple
import redis.asyncio as aioredis
from venue_auth.ports.rate_limit_port import RateLimitStorePort


class MemoryRateLimitStore(RateLimitStorePort):
    """
    In-memory counters.

    Counters live in one process only. A lock makes increment-and-read
    atomic per store. Finished windows are swept from hit() at most once per
    window length, so the map only holds clients seen within the last window.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.monotonic
        self._windows: Dict[str, Tuple[int, float]] = {}  # key -> (count, reset_at)
        self._next_sweep: Optional[float] = None
        self._lock = asyncio.Lock()

    async def hit(self, key: str, ttl: int) -> Tuple[int, int]:
        async with self._lock:
            now = self._clock()
            if self._next_sweep is None or now >= self._next_sweep:
                self._drop_expired(now)
                self._next_sweep = now + ttl
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + ttl
            count += 1
            self._windows[key] = (count, reset_at)
            return count, max(1, math.ceil(reset_at - now))

    async def reset(self, key: str) -> bool:
        async with self._lock:
            return self._windows.pop(key, None) is not None

    async def cleanup_expired(self) -> int:
        """Drop finished windows. Returns number removed."""
        async with self._lock:
            return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        expired = [k for k, (_, reset_at) in self._windows.items() if now >= reset_at]
        for key in expired:
            del self._windows[key]
        return len(expired)


class RedisRateLimitStore(RateLimitStorePort):
    """
    Redis counters shared across processes.

    INCR is atomic server-side; EXPIRE NX sets the window only on the first
    hit, so later hits do not extend it.
    """

    def __init__(self, redis_client=None, url: str = "redis://localhost:6379/0", prefix: str = "venue:throttle:"):
        self._redis = redis_client
        self._url = url
        self._prefix = prefix

    def _get_redis(self):
        """Lazy create the Redis client."""
        if self._redis is None:
            self._redis = aioredis.from_url(self._url, decode_responses=True)
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def hit(self, key: str, ttl: int) -> Tuple[int, int]:
        pipe = self._get_redis().pipeline(transaction=True)
        pipe.incr(self._key(key))
        pipe.expire(self._key(key), ttl, nx=True)
        pipe.ttl(self._key(key))
        count, _, remaining = await pipe.execute()
        return int(count), max(1, int(remaining))

    async def reset(self, key: str) -> bool:
        return bool(await self._get_redis().delete(self._key(key)))
