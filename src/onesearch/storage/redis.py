"""Redis-backed key-value store.

Options are stored as orjson-encoded documents under a namespaced key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

from onesearch.storage.base import KeyValueStore

if TYPE_CHECKING:
    from redis.asyncio import Redis


class RedisStore(KeyValueStore):
    """Option storage on a shared Redis client."""

    PREFIX = "onesearch:option"

    def __init__(self, client: Redis, owns_client: bool = False):
        self.client = client
        self._owns_client = owns_client

    def _key(self, key: str) -> str:
        return f"{self.PREFIX}:{key}"

    async def get(self, key: str, default: Any = None) -> Any:
        raw = await self.client.get(self._key(key))
        if raw is None:
            return default
        return orjson.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self.client.set(self._key(key), orjson.dumps(value))

    async def delete(self, key: str) -> bool:
        return bool(await self.client.delete(self._key(key)))

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
