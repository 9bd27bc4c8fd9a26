"""
Rate Limiter - Per-client throttling of login and 2FA attempts.
"""

import logging
from typing import Optional
from venue_auth.errors import ThrottledError
from venue_auth.ports.rate_limit_port import RateLimitStorePort

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def client_identity(
    forwarded_for: Optional[str] = None,
    peer: Optional[str] = None,
    trust_forwarded: bool = True,
) -> str:
    """
    Resolve the client's network identity.

    Args:
        forwarded_for: X-Forwarded-For header value (comma-separated list)
        peer: Direct peer address
        trust_forwarded: Honor the forwarded list (only behind a trusted proxy)

    Returns:
        First forwarded address if present and trusted, else the peer address
    """
    if trust_forwarded and forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer or UNKNOWN_CLIENT


class RateLimiter:
    """
    Fixed-window rate limiter.

    ttl and limit are process-wide, set once at startup.
    """

    def __init__(self, store: RateLimitStorePort, ttl: int, limit: int):
        """
        Args:
            store: Counter storage
            ttl: Window length in seconds
            limit: Max hits per client within a window
        """
        self._store = store
        self._ttl = ttl
        self._limit = limit

    @classmethod
    def from_settings(cls, settings, store: RateLimitStorePort) -> "RateLimiter":
        return cls(store=store, ttl=settings.throttle_ttl, limit=settings.throttle_limit)

    async def check(self, identity: str) -> int:
        """
        Count a hit for identity.

        Returns:
            Remaining hits in the current window

        Raises:
            ThrottledError: Count within the window exceeds the limit
        """
        count, retry_after = await self._store.hit(identity, self._ttl)
        if count > self._limit:
            logger.warning("Throttled client %s (%d hits)", identity, count)
            raise ThrottledError(retry_after=retry_after)
        return self._limit - count

    async def reset(self, identity: str) -> bool:
        return await self._store.reset(identity)
