"""Base key-value store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract base class for option storage backends.

    Writes are last-write-wins; there is no locking or compare-and-swap.
    """

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value stored under ``key`` or ``default``."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under ``key``."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete ``key``. Returns True if it existed."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
