"""Redis TTL cache for OneSearch.

Entries are stored with SETEX so Redis itself enforces expiry; the expiry
timestamp travels with the value for callers that want to report it.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, cast

import orjson

from onesearch.cache.base import CacheBackend, CachedValue

if TYPE_CHECKING:
    from redis.asyncio import Redis


class RedisCache(CacheBackend):
    """TTL cache on a shared Redis client."""

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> CachedValue | None:
        raw = await self.client.get(key)
        if raw is None:
            return None

        entry = orjson.loads(raw)
        cached = CachedValue(entry["value"], float(entry["expires_at"]))
        if cached.is_expired(time.time()):
            return None
        return cached

    async def set(self, key: str, value: Any, ttl: int) -> CachedValue:
        expires_at = time.time() + ttl
        await self.client.setex(
            key, ttl, orjson.dumps({"value": value, "expires_at": expires_at})
        )
        return CachedValue(value, expires_at)

    async def delete(self, key: str) -> bool:
        return bool(await self.client.delete(key))

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except Exception:
            return False
