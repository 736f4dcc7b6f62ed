"""Base cache backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CachedValue:
    """A cached JSON value and the epoch second it expires at."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheBackend(ABC):
    """Abstract base class for TTL cache backends.

    Values must be JSON-serializable. Writes are last-write-wins.
    """

    @abstractmethod
    async def get(self, key: str) -> CachedValue | None:
        """Return the unexpired entry for ``key`` or None."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> CachedValue:
        """Store ``value`` for ``ttl`` seconds."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop ``key``. Returns True if it existed."""
        ...

    async def health_check(self) -> bool:
        """Check backend connectivity. In-process backends are always up."""
        return True
