"""Handshake-gated registry mutations.

A brand site only enters (or changes in) the registry after a passing
trust handshake. Validation and the handshake both happen before any write,
so a failure leaves the stored registry untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from onesearch.federation.handshake import TrustHandshake
from onesearch.federation.notify import BrandNotifier
from onesearch.federation.registry import RegistryChange, SiteRegistry
from onesearch.models import BrandSite

logger = logging.getLogger(__name__)


class SiteLinker:
    """Adds, edits and removes brand sites on the governing node."""

    def __init__(self, registry: SiteRegistry, handshake: TrustHandshake, notifier: BrandNotifier):
        self.registry = registry
        self.handshake = handshake
        self.notifier = notifier

    async def add(self, data: BrandSite | Mapping[str, Any]) -> RegistryChange:
        site = await self.registry.check_unique(data)
        await self.handshake.verify(site)
        return await self.registry.add(site)

    async def update(self, index: int, data: BrandSite | Mapping[str, Any]) -> RegistryChange:
        await self.registry.get(index)
        site = await self.registry.check_unique(data, skip_index=index)
        await self.handshake.verify(site)
        return await self.registry.update(index, site)

    async def remove(self, index: int) -> RegistryChange:
        removed, change = await self.registry.remove(index)
        if not await self.notifier.release(removed):
            logger.info(f"{removed.url} was not released; it must be unpaired manually")
        return change
