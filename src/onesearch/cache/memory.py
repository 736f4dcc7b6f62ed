"""In-process TTL cache."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import orjson

from onesearch.cache.base import CacheBackend, CachedValue


class MemoryCache(CacheBackend):
    """Dictionary-backed TTL cache.

    Expired entries are dropped lazily on read. The clock is injectable so
    expiry can be tested without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._entries: dict[str, CachedValue] = {}

    async def get(self, key: str) -> CachedValue | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return CachedValue(orjson.loads(entry.value), entry.expires_at)

    async def set(self, key: str, value: Any, ttl: int) -> CachedValue:
        expires_at = self.clock() + ttl
        self._entries[key] = CachedValue(orjson.dumps(value), expires_at)
        return CachedValue(value, expires_at)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)
