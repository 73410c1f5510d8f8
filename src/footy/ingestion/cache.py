"""Process-wide TTL cache for decoded provider responses.

Expiry is measured on an injectable monotonic clock.
"""

import time
from typing import Any, Callable, NamedTuple, Optional


class CacheEntry(NamedTuple):
    payload: Any
    expires_at: float  # clock() reading after which the entry is stale


class Cache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default
        if self._clock() >= entry.expires_at:
            del self._store[key]
            return default
        return entry.payload

    def set(self, key: str, payload: Any, ttl_seconds: float) -> None:
        """Cache payload for ttl_seconds; a non-positive TTL evicts key instead."""
        if ttl_seconds <= 0:
            self._store.pop(key, None)
            return
        self._store[key] = CacheEntry(payload, self._clock() + ttl_seconds)

    def clear(self) -> None:
        self._store.clear()


_cache: Optional[Cache] = None


def get_cache() -> Cache:
    global _cache
    if _cache is None:
        _cache = Cache()
    return _cache
