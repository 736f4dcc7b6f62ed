"""Option store factory for OneSearch."""

from __future__ import annotations

from typing import TYPE_CHECKING

from onesearch.config import Settings
from onesearch.storage.base import KeyValueStore
from onesearch.storage.memory import MemoryStore
from onesearch.storage.redis import RedisStore

if TYPE_CHECKING:
    from redis.asyncio import Redis


def create_store(settings: Settings, redis_client: Redis | None = None) -> KeyValueStore:
    """Return the option store selected by ``settings.store_backend``."""
    backend = settings.store_backend.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "redis":
        if redis_client is None:
            raise ValueError("A Redis client is required for store_backend='redis'")
        return RedisStore(redis_client)
    raise ValueError("Unsupported store_backend. Supported values: memory, redis.")
