"""Peer-to-peer endpoints.

Served by every node under /wp-json/onesearch/v1:
- GET    /health-check               - Trust handshake (brand) / liveness (governing)
- GET    /algolia-credentials        - Governing: shared search credentials
- GET    /searchable-sites           - Governing: every site in the federation
- GET    /search-settings            - Governing: search scope for the requester
- POST   /bust-search-settings-cache - Brand: drop cached search settings
- DELETE /governing-url              - Brand: forget the governing node

Every route runs the auth gate first.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from onesearch.api.deps import ContainerDep, ContextDep, PeerDep
from onesearch.errors import RoleMismatchError, UnknownRequesterError
from onesearch.federation import protocol
from onesearch.federation.handshake import answer_health_check
from onesearch.federation.proxy import ProxyResource
from onesearch.models import SiteRole, unique_urls
from onesearch.security.auth import RequestContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix=protocol.API_PREFIX, tags=["Peer"])


def _require_role(ctx: RequestContext, role: SiteRole) -> None:
    if ctx.role != role:
        raise RoleMismatchError(role.value)


@router.get(f"/{protocol.HEALTH_CHECK}")
async def health_check(ctx: ContextDep, container: ContainerDep, auth: PeerDep) -> dict[str, Any]:
    """Answer a health check.

    On a brand node this is the brand half of the trust handshake: the first
    authenticated governing origin is recorded as this node's governing site.
    """
    if ctx.role == SiteRole.BRAND:
        return await answer_health_check(container.options, ctx.origin)
    return {"success": True, "message": "Health check passed successfully."}


# --------------------------------------------------------------------------
# Governing node
# --------------------------------------------------------------------------


@router.get(f"/{protocol.ALGOLIA_CREDENTIALS}")
async def algolia_credentials(
    ctx: ContextDep, container: ContainerDep, auth: PeerDep
) -> dict[str, Any]:
    _require_role(ctx, SiteRole.GOVERNING)
    credentials = await container.options.get_algolia_credentials()
    return credentials.model_dump()


@router.get(f"/{protocol.SEARCHABLE_SITES}")
async def searchable_sites(
    ctx: ContextDep, container: ContainerDep, auth: PeerDep
) -> dict[str, Any]:
    """The governing site followed by every registered brand site."""
    _require_role(ctx, SiteRole.GOVERNING)
    sites = await container.registry.list()
    urls = [container.settings.site_url] if container.settings.site_url else []
    urls.extend(site.url for site in sites)
    return {"success": True, "searchable_sites": unique_urls(urls)}


@router.get(f"/{protocol.SEARCH_SETTINGS}")
async def search_settings(
    ctx: ContextDep, container: ContainerDep, auth: PeerDep
) -> dict[str, Any]:
    """Search scope of the brand site identified by the presented token."""
    _require_role(ctx, SiteRole.GOVERNING)
    if auth.site is None:
        raise UnknownRequesterError()
    config = await container.options.get_search_settings_for(auth.site.url)
    return {"success": True, "config": config.model_dump()}


# --------------------------------------------------------------------------
# Brand node
# --------------------------------------------------------------------------


@router.post(f"/{protocol.BUST_SEARCH_SETTINGS_CACHE}")
async def bust_search_settings_cache(
    ctx: ContextDep, container: ContainerDep, auth: PeerDep
) -> dict[str, Any]:
    _require_role(ctx, SiteRole.BRAND)
    await container.auth.require_governing_origin(ctx)
    removed = await container.proxy.invalidate(ProxyResource.SEARCH_SETTINGS)
    logger.info("Search settings cache cleared on request of the governing site")
    return {"success": True, "cleared": removed}


@router.delete(f"/{protocol.GOVERNING_URL}")
async def release_governing_url(
    ctx: ContextDep, container: ContainerDep, auth: PeerDep
) -> dict[str, Any]:
    """Forget the governing node and everything proxied from it."""
    _require_role(ctx, SiteRole.BRAND)
    await container.auth.require_governing_origin(ctx)
    await container.options.clear_parent_site_url()
    await container.proxy.invalidate()
    logger.info("Governing site released this node")
    return {"success": True, "message": "Governing site URL removed."}
