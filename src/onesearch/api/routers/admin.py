"""Administrator endpoints.

All routes require an administrator session (``Authorization: Bearer``):
- GET|PUT    /site-type                 - Node role
- GET|POST   /shared-sites              - Brand-site registry (handshake-gated)
- PUT|DELETE /shared-sites/{index}
- GET|POST   /secret-key                - Brand: read / regenerate shared token
- GET|DELETE /governing-site            - Brand: governing URL
- GET|PUT    /local-algolia-credentials - Locally configured credentials
- GET|PUT    /sites-search-settings     - Governing: per-brand search scope
- GET        /proxy/{resource}          - Brand: what the proxy resolves
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body
from pydantic import BaseModel, Field

from onesearch.api.deps import AdminDep, ContainerDep
from onesearch.errors import RoleMismatchError, ValidationError
from onesearch.federation import protocol
from onesearch.federation.proxy import ProxyResource
from onesearch.federation.registry import RegistryChange
from onesearch.models import AlgoliaCredentials, BrandSite, SiteRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix=protocol.API_PREFIX, tags=["Admin"])


# --------------------------------------------------------------------------
# Request Models
# --------------------------------------------------------------------------


class SiteTypeRequest(BaseModel):
    """Request to set the node role."""

    site_type: str
    force: bool = False


class AlgoliaCredentialsRequest(BaseModel):
    """Locally configured search credentials."""

    app_id: str | None = None
    write_key: str | None = None
    admin_key: str | None = None


class SearchSettingsRequest(BaseModel):
    """Per-brand search settings keyed by site URL."""

    settings: dict[str, dict[str, Any]] = Field(default_factory=dict)


def _require_role(ctx_role: SiteRole, role: SiteRole) -> None:
    if ctx_role != role:
        raise RoleMismatchError(role.value)


def _site_dict(site: BrandSite) -> dict[str, Any]:
    return {**site.public_dict(), "api_key": site.api_key}


def _change_response(change: RegistryChange) -> dict[str, Any]:
    return {
        "success": True,
        "shared_sites": [_site_dict(site) for site in change.sites],
        "transition": change.transition.value,
        "requires_reload": change.requires_reload,
    }


# --------------------------------------------------------------------------
# Site role
# --------------------------------------------------------------------------


@router.get("/site-type")
async def get_site_type(ctx: AdminDep) -> dict[str, Any]:
    return {"success": True, "site_type": ctx.role.value}


@router.put("/site-type")
async def set_site_type(
    request: SiteTypeRequest, ctx: AdminDep, container: ContainerDep
) -> dict[str, Any]:
    """Choose this node's role. Changing an existing role needs ``force``."""
    try:
        role = SiteRole(request.site_type)
    except ValueError:
        raise ValidationError(
            {"site_type": f"Unknown site type '{request.site_type}'."}
        ) from None

    role = await container.options.set_site_role(role, force=request.force)
    return {"success": True, "site_type": role.value}


# --------------------------------------------------------------------------
# Brand-site registry (governing node)
# --------------------------------------------------------------------------


@router.get("/shared-sites")
async def list_shared_sites(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    sites = await container.registry.list()
    return {"success": True, "shared_sites": [_site_dict(site) for site in sites]}


@router.post("/shared-sites")
async def add_shared_site(
    ctx: AdminDep,
    container: ContainerDep,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Register a brand site after a passing health check."""
    _require_role(ctx.role, SiteRole.GOVERNING)
    change = await container.linker.add(payload)
    return _change_response(change)


@router.put("/shared-sites/{index}")
async def update_shared_site(
    index: int,
    ctx: AdminDep,
    container: ContainerDep,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    _require_role(ctx.role, SiteRole.GOVERNING)
    change = await container.linker.update(index, payload)
    return _change_response(change)


@router.delete("/shared-sites/{index}")
async def delete_shared_site(index: int, ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    """Remove a brand site and ask it, once, to forget this node."""
    _require_role(ctx.role, SiteRole.GOVERNING)
    change = await container.linker.remove(index)
    return _change_response(change)


# --------------------------------------------------------------------------
# Shared token and governing URL (brand node)
# --------------------------------------------------------------------------


@router.get("/secret-key")
async def get_secret_key(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    _require_role(ctx.role, SiteRole.BRAND)
    return {"success": True, "secret_key": await container.options.ensure_api_key()}


@router.post("/secret-key")
async def regenerate_secret_key(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    """Replace the shared token. The governing node must be re-linked."""
    _require_role(ctx.role, SiteRole.BRAND)
    token = await container.options.regenerate_api_key()
    return {"success": True, "secret_key": token}


@router.get("/governing-site")
async def get_governing_site(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    url = await container.options.get_parent_site_url()
    return {"success": True, "governing_site_url": url or ""}


@router.delete("/governing-site")
async def delete_governing_site(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    await container.options.clear_parent_site_url()
    await container.proxy.invalidate()
    return {"success": True, "governing_site_url": ""}


# --------------------------------------------------------------------------
# Local configuration
# --------------------------------------------------------------------------


@router.get("/local-algolia-credentials")
async def get_local_algolia_credentials(
    ctx: AdminDep, container: ContainerDep
) -> dict[str, Any]:
    credentials = await container.options.get_algolia_credentials()
    return {"success": True, **credentials.model_dump()}


@router.put("/local-algolia-credentials")
async def set_local_algolia_credentials(
    request: AlgoliaCredentialsRequest, ctx: AdminDep, container: ContainerDep
) -> dict[str, Any]:
    credentials = AlgoliaCredentials.from_payload(request.model_dump())
    await container.options.set_algolia_credentials(credentials)
    await container.proxy.invalidate(ProxyResource.ALGOLIA_CREDENTIALS)
    return {"success": True, **(await container.options.get_algolia_credentials()).model_dump()}


@router.get("/sites-search-settings")
async def get_sites_search_settings(ctx: AdminDep, container: ContainerDep) -> dict[str, Any]:
    _require_role(ctx.role, SiteRole.GOVERNING)
    settings = await container.options.get_search_settings_map()
    return {
        "success": True,
        "settings": {url: entry.model_dump() for url, entry in settings.items()},
    }


@router.put("/sites-search-settings")
async def set_sites_search_settings(
    request: SearchSettingsRequest, ctx: AdminDep, container: ContainerDep
) -> dict[str, Any]:
    """Store per-brand settings and tell every brand site to re-fetch them."""
    _require_role(ctx.role, SiteRole.GOVERNING)
    settings = await container.options.set_search_settings_map(request.settings)
    await container.proxy.invalidate(ProxyResource.SEARCH_SETTINGS)
    notified = await container.notifier.bust_search_settings()
    failed = [url for url, ok in notified.items() if not ok]
    if failed:
        logger.warning(f"Search settings cache not cleared on {len(failed)} brand site(s)")

    return {
        "success": True,
        "settings": {url: entry.model_dump() for url, entry in settings.items()},
        "notified": notified,
    }


# --------------------------------------------------------------------------
# Proxy view (brand node)
# --------------------------------------------------------------------------


@router.get("/proxy/{resource}")
async def proxy_resource(
    resource: ProxyResource, ctx: AdminDep, container: ContainerDep
) -> dict[str, Any]:
    """What this node currently resolves for ``resource``."""
    value = await container.proxy.resolve(resource)
    if isinstance(value, BaseModel):
        value = value.model_dump()
    return {"success": True, "resource": resource.value, "value": value}
