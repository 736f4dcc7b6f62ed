"""Credential proxy: a brand node's view of its governing node's configuration.

Three resources are fetched from the governing node, each cached under its
own key and TTL:

| Resource            | TTL    | Empty result                           |
|---------------------|--------|----------------------------------------|
| algolia-credentials | 7 days | cached, even when every field is null  |
| searchable-sites    | 1 hour | never cached                           |
| search-settings     | 1 hour | never cached when the config is absent |

Per resource: cache hit -> return; no governing URL or no shared token ->
local fallback (not cached); otherwise an authenticated GET whose failures
surface as ProxyNetworkError / ProxyProtocolError. ``resolve`` is the
degrade-gracefully variant that logs the failure and returns the fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import orjson

from onesearch.cache.keys import CacheKeys
from onesearch.cache.layer import CacheLayer
from onesearch.config import HOUR_IN_SECONDS, WEEK_IN_SECONDS
from onesearch.errors import ProxyError, ProxyNetworkError, ProxyProtocolError
from onesearch.federation import protocol
from onesearch.models import AlgoliaCredentials, SearchSettings, sanitize_url_list
from onesearch.storage.options import NodeOptions

logger = logging.getLogger(__name__)


class ProxyResource(str, Enum):
    """Resources a brand node proxies from its governing node."""

    ALGOLIA_CREDENTIALS = protocol.ALGOLIA_CREDENTIALS
    SEARCHABLE_SITES = protocol.SEARCHABLE_SITES
    SEARCH_SETTINGS = protocol.SEARCH_SETTINGS


# Sanitized payloads; None means "nothing usable came back".
def _sanitize_credentials(payload: dict[str, Any]) -> dict[str, Any]:
    return AlgoliaCredentials.from_payload(payload).model_dump()


def _sanitize_sites(payload: dict[str, Any]) -> list[str] | None:
    return sanitize_url_list(payload.get("searchable_sites")) or None


def _sanitize_settings(payload: dict[str, Any]) -> dict[str, Any] | None:
    config = payload.get("config")
    if not isinstance(config, dict) or not config:
        return None
    return SearchSettings.from_payload(config).model_dump()


@dataclass(frozen=True)
class ResourcePolicy:
    """Cache key, lifetime and payload handling of one proxied resource."""

    resource: ProxyResource
    cache_key: str
    ttl: int
    sanitize: Callable[[dict[str, Any]], Any]
    cache_empty: bool


class CredentialProxy:
    """Fetches shared configuration from the governing node with caching."""

    def __init__(
        self,
        options: NodeOptions,
        cache: CacheLayer,
        client: httpx.AsyncClient,
        *,
        credentials_ttl: int = WEEK_IN_SECONDS,
        searchable_sites_ttl: int = HOUR_IN_SECONDS,
        search_settings_ttl: int = HOUR_IN_SECONDS,
        user_agent: str = "OneSearch",
    ):
        self.options = options
        self.cache = cache
        self.client = client
        self.user_agent = user_agent
        self.policies = {
            ProxyResource.ALGOLIA_CREDENTIALS: ResourcePolicy(
                ProxyResource.ALGOLIA_CREDENTIALS,
                CacheKeys.algolia_credentials(),
                credentials_ttl,
                _sanitize_credentials,
                cache_empty=True,
            ),
            ProxyResource.SEARCHABLE_SITES: ResourcePolicy(
                ProxyResource.SEARCHABLE_SITES,
                CacheKeys.searchable_sites(),
                searchable_sites_ttl,
                _sanitize_sites,
                cache_empty=False,
            ),
            ProxyResource.SEARCH_SETTINGS: ResourcePolicy(
                ProxyResource.SEARCH_SETTINGS,
                CacheKeys.search_settings(),
                search_settings_ttl,
                _sanitize_settings,
                cache_empty=False,
            ),
        }

    # -------------------------------------------------------------------------
    # Typed accessors
    # -------------------------------------------------------------------------

    async def get_algolia_credentials(self) -> AlgoliaCredentials:
        return await self.fetch(ProxyResource.ALGOLIA_CREDENTIALS)

    async def get_searchable_sites(self) -> list[str]:
        return await self.fetch(ProxyResource.SEARCHABLE_SITES)

    async def get_search_settings(self) -> SearchSettings:
        return await self.fetch(ProxyResource.SEARCH_SETTINGS)

    # -------------------------------------------------------------------------
    # Generic fetch
    # -------------------------------------------------------------------------

    async def fetch(self, resource: ProxyResource) -> Any:
        """Return ``resource`` from cache, the governing node or the local fallback.

        Raises:
            ProxyNetworkError: Governing node unreachable or non-200.
            ProxyProtocolError: Governing node replied with a non-object body.
        """
        policy = self.policies[resource]
        fell_back = False

        async def compute() -> Any:
            nonlocal fell_back
            parent_url = await self.options.get_parent_site_url()
            token = await self.options.get_api_key() if parent_url else ""
            if not parent_url or not token:
                fell_back = True
                return await self._local_payload(resource)

            payload = await self._request(resource, parent_url, token)
            return policy.sanitize(payload)

        def is_empty(value: Any) -> bool:
            return fell_back or (not policy.cache_empty and value is None)

        value = await self.cache.get_or_compute(policy.cache_key, policy.ttl, compute, is_empty)
        return self._to_record(resource, value)

    async def resolve(self, resource: ProxyResource) -> Any:
        """Like :meth:`fetch`, but degrade to the local fallback on failure."""
        try:
            return await self.fetch(resource)
        except ProxyError as e:
            logger.warning(f"Falling back to local {resource.value}: {e.code}")
            return self._to_record(resource, await self._local_payload(resource))

    async def invalidate(self, *resources: ProxyResource) -> int:
        """Drop cached values for ``resources`` (all when none given)."""
        targets = resources or tuple(ProxyResource)
        return await self.cache.invalidate(*(self.policies[r].cache_key for r in targets))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _local_payload(self, resource: ProxyResource) -> Any:
        if resource == ProxyResource.ALGOLIA_CREDENTIALS:
            return (await self.options.get_algolia_credentials()).model_dump()
        if resource == ProxyResource.SEARCHABLE_SITES:
            return []
        return SearchSettings.disabled().model_dump()

    @staticmethod
    def _to_record(resource: ProxyResource, value: Any) -> Any:
        if resource == ProxyResource.ALGOLIA_CREDENTIALS:
            return AlgoliaCredentials.model_validate(value or {})
        if resource == ProxyResource.SEARCHABLE_SITES:
            return list(value or [])
        if value is None:
            return SearchSettings.disabled()
        return SearchSettings.model_validate(value)

    async def _request(
        self, resource: ProxyResource, parent_url: str, token: str
    ) -> dict[str, Any]:
        endpoint = protocol.endpoint(parent_url, resource.value)
        headers = {
            "Accept": "application/json",
            protocol.LEGACY_TOKEN_HEADER: token,
            "User-Agent": self.user_agent,
        }

        try:
            response = await self.client.get(endpoint, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"Governing site unreachable for {resource.value}: {e}")
            raise ProxyNetworkError(body=str(e)) from e

        if response.status_code != 200:
            logger.warning(
                f"Governing site returned HTTP {response.status_code} for {resource.value}"
            )
            raise ProxyNetworkError(response.status_code, response.text)

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise ProxyProtocolError() from e
        if not isinstance(payload, dict):
            raise ProxyProtocolError()

        logger.debug(f"Fetched {resource.value} from governing site")
        return payload
