"""Best-effort notifications from the governing node to its brand sites.

Brand sites cache what they proxy. When the governing node changes search
settings, or drops a brand site from its registry, it tells the affected
sites once. Failures are logged and never retried: an unreachable brand
site keeps its cached values until their TTL expires.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from onesearch.federation import protocol
from onesearch.federation.registry import SiteRegistry
from onesearch.models import BrandSite

logger = logging.getLogger(__name__)


class BrandNotifier:
    """Sends fire-once cache and pairing notifications to brand sites."""

    def __init__(self, client: httpx.AsyncClient, registry: SiteRegistry, origin: str = ""):
        self.client = client
        self.registry = registry
        self.origin = origin

    async def _send(self, method: str, site: BrandSite, route: str) -> bool:
        if not site.api_key:
            return False
        try:
            response = await self.client.request(
                method,
                protocol.endpoint(site.url, route),
                headers={
                    "Accept": "application/json",
                    protocol.TOKEN_HEADER: site.api_key,
                    protocol.REQUESTING_ORIGIN_HEADER: self.origin,
                },
            )
        except httpx.RequestError as e:
            logger.warning(f"Could not notify {site.url} ({route}): {e}")
            return False

        if response.status_code != 200:
            logger.warning(f"{site.url} rejected {route} with HTTP {response.status_code}")
            return False
        return True

    async def bust_search_settings(self) -> dict[str, bool]:
        """Ask every registered brand site to drop its cached search settings."""
        sites = await self.registry.list()
        results = await asyncio.gather(
            *(self._send("POST", site, protocol.BUST_SEARCH_SETTINGS_CACHE) for site in sites)
        )
        return {site.url: ok for site, ok in zip(sites, results)}

    async def release(self, site: BrandSite) -> bool:
        """Tell a removed brand site to forget this governing node."""
        return await self._send("DELETE", site, protocol.GOVERNING_URL)
