"""In-process key-value store.

Values are kept in their serialized form so readers never share mutable
state with writers.
"""

from __future__ import annotations

from typing import Any

import orjson

from onesearch.storage.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dictionary-backed store for development and tests."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return orjson.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = orjson.dumps(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def raw(self, key: str) -> bytes | None:
        """Return the serialized bytes stored under ``key``."""
        return self._data.get(key)
