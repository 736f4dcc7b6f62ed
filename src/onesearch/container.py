"""Composition root for a OneSearch node.

Builds every component once, in dependency order, and hands out explicit
references. Nothing in the package looks components up globally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
import redis.asyncio as redis

from onesearch.cache.base import CacheBackend
from onesearch.cache.layer import CacheLayer, create_cache_backend
from onesearch.config import Settings
from onesearch.federation.handshake import TrustHandshake
from onesearch.federation.linker import SiteLinker
from onesearch.federation.notify import BrandNotifier
from onesearch.federation.proxy import CredentialProxy
from onesearch.federation.registry import SiteRegistry
from onesearch.security.auth import AuthGate
from onesearch.security.secrets import SecretStore
from onesearch.storage.base import KeyValueStore
from onesearch.storage.factory import create_store
from onesearch.storage.options import NodeOptions

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """All components of a running node."""

    settings: Settings
    store: KeyValueStore
    secrets: SecretStore
    options: NodeOptions
    registry: SiteRegistry
    cache: CacheLayer
    http: httpx.AsyncClient
    handshake: TrustHandshake
    proxy: CredentialProxy
    auth: AuthGate
    notifier: BrandNotifier
    linker: SiteLinker
    _redis: Redis | None = field(default=None, repr=False)
    _owns_http: bool = field(default=True, repr=False)

    async def aclose(self) -> None:
        """Close resources the container created."""
        if self._owns_http:
            await self.http.aclose()
        await self.store.close()
        if self._redis is not None:
            await self._redis.aclose()
        logger.info("Container closed")


def build_container(
    settings: Settings,
    store: KeyValueStore | None = None,
    cache: CacheBackend | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Container:
    """Construct the node: secrets -> options -> registry -> cache ->
    handshake -> proxy -> auth gate -> notifier -> linker."""
    redis_client: Redis | None = None
    needs_redis = (store is None and settings.store_backend == "redis") or (
        cache is None and settings.cache_backend == "redis"
    )
    if needs_redis:
        redis_client = redis.from_url(settings.redis_url, decode_responses=False)

    secrets = SecretStore.from_settings(settings)
    if store is None:
        store = create_store(settings, redis_client)
    options = NodeOptions(store, secrets, role_guard=settings.role_guard_enabled)
    registry = SiteRegistry(store, secrets)
    if cache is None:
        cache = create_cache_backend(settings, redis_client)
    cache_layer = CacheLayer(cache)

    owns_http = http_client is None
    http = http_client
    if http is None:
        http = httpx.AsyncClient(timeout=settings.http_timeout)

    handshake = TrustHandshake(http, settings.site_url, user_agent=settings.user_agent)
    proxy = CredentialProxy(
        options,
        cache_layer,
        http,
        credentials_ttl=settings.credentials_cache_ttl,
        searchable_sites_ttl=settings.searchable_sites_cache_ttl,
        search_settings_ttl=settings.search_settings_cache_ttl,
        user_agent=settings.user_agent,
    )
    auth = AuthGate(options, registry)
    notifier = BrandNotifier(http, registry, origin=settings.site_url)
    linker = SiteLinker(registry, handshake, notifier)

    return Container(
        settings=settings,
        store=store,
        secrets=secrets,
        options=options,
        registry=registry,
        cache=cache_layer,
        http=http,
        handshake=handshake,
        proxy=proxy,
        auth=auth,
        notifier=notifier,
        linker=linker,
        _redis=redis_client,
        _owns_http=owns_http,
    )
