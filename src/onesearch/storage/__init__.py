"""Option storage for OneSearch.

An opaque key-value store holding the site role, brand-site registry,
shared token and local credential fallbacks. Values are JSON documents.
"""

from onesearch.storage.base import KeyValueStore
from onesearch.storage.factory import create_store
from onesearch.storage.memory import MemoryStore
from onesearch.storage.options import NodeOptions, OptionKeys
from onesearch.storage.redis import RedisStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "NodeOptions",
    "OptionKeys",
    "RedisStore",
    "create_store",
]
