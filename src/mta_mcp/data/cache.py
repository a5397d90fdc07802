"""Keyed TTL cache for decoded feeds and arrival boards."""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its absolute expiration (monotonic seconds)."""

    value: T
    expires_at: float


class ExpiringCache(Generic[T]):
    """Key -> value cache where every entry carries its own expiration.

    Expired entries are evicted lazily on the next get() for that key; there
    is no background sweep and no capacity bound. A per-key async lock is
    available to callers that want to avoid concurrent fetches for the same
    key without blocking other keys.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            ttl: Default time-to-live in seconds for set().
            clock: Monotonic time source, overridable for testing.
        """
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> T | None:
        """Get the cached value for a key if it hasn't expired.

        Returns:
            The cached value if valid, None if expired or not set.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() < entry.expires_at:
            return entry.value
        del self._entries[key]
        return None

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        """Store a value, overwriting any existing entry for the key.

        Args:
            key: Cache key.
            value: The value to cache.
            ttl: Optional TTL override in seconds.
        """
        ttl = self._ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def lock(self, key: str) -> asyncio.Lock:
        """Get the async lock for coordinating fetches of one key."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
