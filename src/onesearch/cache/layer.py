"""Get-or-compute cache used by the credential proxy.

There is no stampede protection: concurrent callers that miss the same key
all run the compute function and the last write wins.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from onesearch.cache.base import CacheBackend
from onesearch.cache.memory import MemoryCache
from onesearch.cache.redis import RedisCache
from onesearch.config import Settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


def _never_empty(value: Any) -> bool:
    return False


class CacheLayer:
    """TTL cache with a per-call "never cache empty" predicate."""

    def __init__(self, backend: CacheBackend):
        self.backend = backend

    async def get_or_compute(
        self,
        key: str,
        ttl: int,
        compute: Callable[[], Awaitable[Any]],
        is_empty: Callable[[Any], bool] = _never_empty,
    ) -> Any:
        """Return the cached value for ``key`` or compute and store it.

        Args:
            key: Cache key
            ttl: Lifetime in seconds of a stored value
            compute: Coroutine factory producing a fresh value
            is_empty: Values for which this returns True are handed back to
                the caller but never stored, so the next read recomputes.
        """
        cached = await self.backend.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached.value

        value = await compute()
        if is_empty(value):
            logger.debug(f"Not caching empty value: {key}")
            return value

        await self.backend.set(key, value, ttl)
        return value

    async def invalidate(self, *keys: str) -> int:
        """Drop local entries. Peers' caches are unaffected and expire by TTL."""
        deleted = 0
        for key in keys:
            if await self.backend.delete(key):
                deleted += 1
        if deleted:
            logger.info(f"Invalidated {deleted} cache entries")
        return deleted


def create_cache_backend(settings: Settings, redis_client: Redis | None = None) -> CacheBackend:
    """Return the cache backend selected by ``settings.cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return MemoryCache()
    if backend == "redis":
        if redis_client is None:
            raise ValueError("A Redis client is required for cache_backend='redis'")
        return RedisCache(redis_client)
    raise ValueError("Unsupported cache_backend. Supported values: memory, redis.")
