"""Cache key schema for OneSearch.

Key format: {prefix}:{scope}:{resource}

Where:
- prefix: "onesearch" (namespace on a shared Redis)
- scope: "governing" for values proxied from the governing node
- resource: the proxied resource name
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    PREFIX = "onesearch"

    @classmethod
    def algolia_credentials(cls) -> str:
        """Key for credentials proxied from the governing node."""
        return f"{cls.PREFIX}:governing:algolia_credentials"

    @classmethod
    def searchable_sites(cls) -> str:
        """Key for the searchable-sites list proxied from the governing node."""
        return f"{cls.PREFIX}:governing:searchable_sites"

    @classmethod
    def search_settings(cls) -> str:
        """Key for this brand node's search settings."""
        return f"{cls.PREFIX}:governing:search_settings"

    @classmethod
    def all_governing(cls) -> list[str]:
        """Every key holding a value proxied from the governing node."""
        return [cls.algolia_credentials(), cls.searchable_sites(), cls.search_settings()]
