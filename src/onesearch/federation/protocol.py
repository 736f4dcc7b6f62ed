"""Wire constants for the peer-to-peer protocol.

Nodes talk JSON over HTTPS under a fixed REST namespace. These names are
part of the contract with deployed peers and must not change.
"""

from __future__ import annotations

NAMESPACE = "onesearch/v1"
API_PREFIX = f"/wp-json/{NAMESPACE}"

# Request headers
TOKEN_HEADER = "X-OneSearch-Token"
LEGACY_TOKEN_HEADER = "X-OneSearch-Plugins-Token"
REQUESTING_ORIGIN_HEADER = "X-OneSearch-Requesting-Origin"

# Peer endpoints
HEALTH_CHECK = "health-check"
ALGOLIA_CREDENTIALS = "algolia-credentials"
SEARCHABLE_SITES = "searchable-sites"
SEARCH_SETTINGS = "search-settings"
BUST_SEARCH_SETTINGS_CACHE = "bust-search-settings-cache"
GOVERNING_URL = "governing-url"

# Health-check response codes
ALREADY_CONNECTED = "already_connected"


def endpoint(base_url: str, route: str) -> str:
    """Build the absolute URL of a peer endpoint."""
    return f"{base_url.strip().rstrip('/')}{API_PREFIX}/{route}"
