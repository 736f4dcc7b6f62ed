"""Cache layer for OneSearch.

Provides the get-or-compute TTL cache used by the credential proxy:
- In-process or Redis backends
- Per-resource "never cache empty" policy
- Explicit local invalidation
"""

from onesearch.cache.base import CacheBackend, CachedValue
from onesearch.cache.keys import CacheKeys
from onesearch.cache.layer import CacheLayer, create_cache_backend
from onesearch.cache.memory import MemoryCache
from onesearch.cache.redis import RedisCache

__all__ = [
    "CacheBackend",
    "CachedValue",
    "CacheKeys",
    "CacheLayer",
    "MemoryCache",
    "RedisCache",
    "create_cache_backend",
]
