"""Registry of brand sites kept by the governing node.

The whole list is stored as one option and every mutation is a
read-modify-write of that list. There is no optimistic-lock token, so two
concurrent edits can overwrite each other; the last write wins.

Shared tokens are encrypted in storage. Records that a mutation does not
touch are written back exactly as they were read, so an unchanged entry's
ciphertext never churns.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from onesearch.errors import DuplicateSiteError, SiteNotFoundError, StorageError
from onesearch.models import BrandSite, normalize_url, validate_brand_site
from onesearch.security.secrets import SecretStore
from onesearch.storage.base import KeyValueStore
from onesearch.storage.options import OptionKeys

logger = logging.getLogger(__name__)

_RECORD_FIELDS = ("name", "url", "api_key")


class RegistryTransition(str, Enum):
    """Registry emptiness change caused by a mutation."""

    NONE = "none"
    FIRST_SITE_ADDED = "first_site_added"
    LAST_SITE_REMOVED = "last_site_removed"


@dataclass
class RegistryChange:
    """Result of a registry mutation."""

    sites: list[BrandSite]
    transition: RegistryTransition = RegistryTransition.NONE

    @property
    def requires_reload(self) -> bool:
        """True when governing-site features were enabled or disabled."""
        return self.transition != RegistryTransition.NONE


class SiteRegistry:
    """CRUD over the governing node's brand-site list."""

    def __init__(self, store: KeyValueStore, secrets: SecretStore):
        self.store = store
        self.secrets = secrets

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def _load_records(self) -> list[dict[str, Any]]:
        raw = await self.store.get(OptionKeys.SHARED_SITES)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageError(OptionKeys.SHARED_SITES, "expected a list")

        records = []
        for position, record in enumerate(raw):
            if not isinstance(record, Mapping):
                raise StorageError(OptionKeys.SHARED_SITES, f"entry {position} is not an object")
            for field in _RECORD_FIELDS:
                if not isinstance(record.get(field), str):
                    raise StorageError(
                        OptionKeys.SHARED_SITES, f"entry {position} has no string '{field}'"
                    )
            records.append(dict(record))
        return records

    def _decode(self, record: Mapping[str, Any]) -> BrandSite:
        # Name length is not re-checked here: only mutations enforce it
        return BrandSite(
            id=record.get("id") or None,
            name=record["name"],
            url=record["url"],
            api_key=self.secrets.decrypt_or_none(record["api_key"]) or "",
        )

    def _encode(self, site: BrandSite) -> dict[str, Any]:
        return {
            "id": site.id or str(uuid4()),
            "name": site.name,
            "url": site.url,
            "api_key": self.secrets.encrypt(site.api_key),
        }

    async def list(self) -> list[BrandSite]:
        """Return every registered brand site with its token decrypted."""
        return [self._decode(r) for r in await self._load_records()]

    async def get(self, index: int) -> BrandSite:
        records = await self._load_records()
        if not 0 <= index < len(records):
            raise SiteNotFoundError(index)
        return self._decode(records[index])

    async def find_by_url(self, url: str) -> BrandSite | None:
        target = normalize_url(url)
        for site in await self.list():
            if site.url == target:
                return site
        return None

    async def find_by_token(self, token: str) -> BrandSite | None:
        """Return the site whose shared token equals ``token``.

        Every registered token is compared in constant time.
        """
        if not token:
            return None
        presented = token.encode("utf-8")
        match: BrandSite | None = None
        for site in await self.list():
            if site.api_key and hmac.compare_digest(site.api_key.encode("utf-8"), presented):
                match = match or site
        return match

    async def is_empty(self) -> bool:
        return not await self._load_records()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @staticmethod
    def _ensure_unique(
        records: list[dict[str, Any]], site: BrandSite, skip_index: int | None = None
    ) -> None:
        for position, record in enumerate(records):
            if position != skip_index and normalize_url(record["url"]) == site.url:
                raise DuplicateSiteError(site.url)

    async def check_unique(
        self, site: BrandSite | Mapping[str, Any], skip_index: int | None = None
    ) -> BrandSite:
        """Validate ``site`` and reject a URL that is already registered."""
        site = validate_brand_site(site)
        self._ensure_unique(await self._load_records(), site, skip_index)
        return site

    async def _save(self, records: list[dict[str, Any]]) -> list[BrandSite]:
        await self.store.set(OptionKeys.SHARED_SITES, records)
        return [self._decode(r) for r in records]

    async def add(self, site: BrandSite | Mapping[str, Any]) -> RegistryChange:
        """Append a brand site.

        Callers must have completed a successful trust handshake with the
        site first; the registry only validates structure.
        """
        site = validate_brand_site(site)
        records = await self._load_records()
        self._ensure_unique(records, site)

        records.append(self._encode(site))
        sites = await self._save(records)
        logger.info(f"Registered brand site {site.url}")

        transition = (
            RegistryTransition.FIRST_SITE_ADDED
            if len(records) == 1
            else RegistryTransition.NONE
        )
        return RegistryChange(sites, transition)

    async def update(self, index: int, site: BrandSite | Mapping[str, Any]) -> RegistryChange:
        """Replace the brand site at ``index``, keeping its id."""
        site = validate_brand_site(site)
        records = await self._load_records()
        if not 0 <= index < len(records):
            raise SiteNotFoundError(index)
        self._ensure_unique(records, site, skip_index=index)

        site = site.model_copy(update={"id": records[index].get("id") or site.id})
        records[index] = self._encode(site)
        sites = await self._save(records)
        logger.info(f"Updated brand site {site.url}")
        return RegistryChange(sites)

    async def remove(self, index: int) -> tuple[BrandSite, RegistryChange]:
        """Delete the brand site at ``index``.

        Returns the removed site and the change. Emptying the registry is
        reported as ``LAST_SITE_REMOVED`` so callers can reload state that
        depends on it.
        """
        records = await self._load_records()
        if not 0 <= index < len(records):
            raise SiteNotFoundError(index)

        removed = self._decode(records.pop(index))
        sites = await self._save(records)
        logger.info(f"Removed brand site {removed.url}")

        transition = (
            RegistryTransition.LAST_SITE_REMOVED if not records else RegistryTransition.NONE
        )
        return removed, RegistryChange(sites, transition)
