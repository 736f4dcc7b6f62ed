"""Typed access to the node's persisted options.

NodeOptions is the storage boundary: raw option values are read from the
key-value store and turned into validated records here. Secrets (the shared
token, Algolia write/admin keys) are encrypted before they reach the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from onesearch.errors import RoleLockedError, StorageError, ValidationError
from onesearch.models import (
    AlgoliaCredentials,
    SearchSettings,
    SiteRole,
    normalize_url,
    sanitize_text,
    sanitize_url,
)
from onesearch.security.secrets import SecretStore, generate_token
from onesearch.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class OptionKeys:
    """Option names used in the key-value store."""

    PREFIX = "onesearch_"

    SITE_ROLE = PREFIX + "site_type"
    # Brand node
    API_KEY = PREFIX + "consumer_api_key"
    PARENT_SITE_URL = PREFIX + "parent_site_url"
    # Governing node
    SHARED_SITES = PREFIX + "shared_sites"
    ALGOLIA_CREDENTIALS = PREFIX + "algolia_credentials"
    SEARCH_SETTINGS = PREFIX + "sites_search_settings"


class NodeOptions:
    """Validated getters and setters over the option store."""

    def __init__(self, store: KeyValueStore, secrets: SecretStore, role_guard: bool = True):
        self.store = store
        self.secrets = secrets
        self.role_guard = role_guard

    # -------------------------------------------------------------------------
    # Site role
    # -------------------------------------------------------------------------

    async def get_site_role(self) -> SiteRole:
        return SiteRole.parse(await self.store.get(OptionKeys.SITE_ROLE))

    async def set_site_role(self, role: SiteRole, force: bool = False) -> SiteRole:
        """Set the role of this node.

        Once a role is chosen it can only be changed with ``force`` (or with
        the guard disabled). Choosing ``brand-site`` ensures a shared token
        exists.

        Raises:
            RoleLockedError: If a different role is already set.
        """
        current = await self.get_site_role()
        if current == role:
            return current
        if self.role_guard and not force and current != SiteRole.UNSET:
            raise RoleLockedError(current.value, role.value)

        if role == SiteRole.UNSET:
            await self.store.delete(OptionKeys.SITE_ROLE)
        else:
            await self.store.set(OptionKeys.SITE_ROLE, role.value)
        logger.info(f"Site role changed from {current.value} to {role.value}")

        if role == SiteRole.BRAND:
            await self.ensure_api_key()
        return role

    async def is_governing(self) -> bool:
        return await self.get_site_role() == SiteRole.GOVERNING

    async def is_brand(self) -> bool:
        return await self.get_site_role() == SiteRole.BRAND

    # -------------------------------------------------------------------------
    # Brand node: governing URL and shared token
    # -------------------------------------------------------------------------

    async def get_parent_site_url(self) -> str | None:
        value = await self.store.get(OptionKeys.PARENT_SITE_URL)
        if value is None:
            return None
        if not isinstance(value, str):
            raise StorageError(OptionKeys.PARENT_SITE_URL, "expected a string")
        return value or None

    async def set_parent_site_url(self, url: str) -> str:
        """Record the governing node URL (stored without a trailing slash)."""
        sanitized = sanitize_url(url)
        if not sanitized:
            raise ValidationError({"parent_site_url": "Valid parent site URL is required."})
        value = sanitized.rstrip("/")
        await self.store.set(OptionKeys.PARENT_SITE_URL, value)
        logger.info(f"Governing site set to {value}")
        return value

    async def clear_parent_site_url(self) -> bool:
        return await self.store.delete(OptionKeys.PARENT_SITE_URL)

    async def get_api_key(self) -> str:
        """Return this node's shared token, or an empty string if unusable."""
        value = await self.store.get(OptionKeys.API_KEY)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise StorageError(OptionKeys.API_KEY, "expected an encrypted string")
        return self.secrets.decrypt_or_none(value) or ""

    async def ensure_api_key(self) -> str:
        """Return the shared token, generating one when none is stored."""
        return await self.get_api_key() or await self.regenerate_api_key()

    async def regenerate_api_key(self) -> str:
        """Replace the shared token. Returns the new plaintext token."""
        token = generate_token()
        await self.store.set(OptionKeys.API_KEY, self.secrets.encrypt(token))
        logger.info("Shared token regenerated")
        return token

    # -------------------------------------------------------------------------
    # Governing node: Algolia credentials and per-brand search settings
    # -------------------------------------------------------------------------

    async def get_algolia_credentials(self) -> AlgoliaCredentials:
        """Return the locally configured credentials with keys decrypted."""
        value = await self.store.get(OptionKeys.ALGOLIA_CREDENTIALS)
        if value is None:
            return AlgoliaCredentials()
        if not isinstance(value, Mapping):
            raise StorageError(OptionKeys.ALGOLIA_CREDENTIALS, "expected an object")

        app_id = value.get("app_id")
        return AlgoliaCredentials(
            app_id=app_id if isinstance(app_id, str) and app_id else None,
            write_key=self.secrets.decrypt_or_none(value.get("write_key")),
            admin_key=self.secrets.decrypt_or_none(value.get("admin_key")),
        )

    async def set_algolia_credentials(self, credentials: AlgoliaCredentials) -> None:
        def _encrypt(secret: str | None) -> str | None:
            secret = sanitize_text(secret) if secret else ""
            return self.secrets.encrypt(secret) if secret else None

        await self.store.set(
            OptionKeys.ALGOLIA_CREDENTIALS,
            {
                "app_id": sanitize_text(credentials.app_id) or None,
                "write_key": _encrypt(credentials.write_key),
                "admin_key": _encrypt(credentials.admin_key),
            },
        )

    async def get_search_settings_map(self) -> dict[str, SearchSettings]:
        value = await self.store.get(OptionKeys.SEARCH_SETTINGS)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise StorageError(OptionKeys.SEARCH_SETTINGS, "expected an object")
        return {
            url: SearchSettings.from_payload(entry if isinstance(entry, Mapping) else {})
            for url, entry in value.items()
        }

    async def set_search_settings_map(
        self, settings: Mapping[str, SearchSettings | Mapping[str, Any]]
    ) -> dict[str, SearchSettings]:
        """Store per-brand settings keyed by normalized site URL."""
        normalized: dict[str, SearchSettings] = {}
        for url, entry in settings.items():
            if not sanitize_url(url):
                raise ValidationError({"settings": f"Invalid site URL: {url}"})
            if not isinstance(entry, SearchSettings):
                entry = SearchSettings.from_payload(entry if isinstance(entry, Mapping) else {})
            normalized[normalize_url(url)] = entry

        await self.store.set(
            OptionKeys.SEARCH_SETTINGS,
            {url: entry.model_dump() for url, entry in normalized.items()},
        )
        return normalized

    async def get_search_settings_for(self, site_url: str) -> SearchSettings:
        settings = await self.get_search_settings_map()
        return settings.get(normalize_url(site_url), SearchSettings.disabled())
