"""
Rate Limit Port - Interface for per-client hit counters.

Implementations:
- MemoryRateLimitStore: In-memory counters (single process)
- RedisRateLimitStore: Redis counters (shared across processes)
"""

from abc import ABC, abstractmethod
from typing import Tuple


class RateLimitStorePort(ABC):
    """Port: Atomic fixed-window counters."""

    @abstractmethod
    async def hit(self, key: str, ttl: int) -> Tuple[int, int]:
        """
        Atomically increment the counter for key.

        The window starts on the first hit and lasts ttl seconds.

        Args:
            key: Client identity
            ttl: Window length in seconds

        Returns:
            (count within the current window, seconds until the window resets)
        """
        pass

    @abstractmethod
    async def reset(self, key: str) -> bool:
        """
        Clear the counter for key.

        Returns:
            True if a counter existed
        """
        pass
