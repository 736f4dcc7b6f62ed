"""FastAPI dependencies shared by the OneSearch routers.

Provides:
- the node's Container (from app state)
- a RequestContext built once per request
- administrator and peer-token guards
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from onesearch.container import Container
from onesearch.errors import AdminRequiredError
from onesearch.federation import protocol
from onesearch.security.auth import AuthResult, RequestContext, resolve_admin


def get_container(request: Request) -> Container:
    """Return the node's component container."""
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


async def get_request_context(request: Request, container: ContainerDep) -> RequestContext:
    """Build the per-request context from headers and the stored role."""
    headers = request.headers
    token = headers.get(protocol.TOKEN_HEADER) or headers.get(protocol.LEGACY_TOKEN_HEADER) or ""
    origin = headers.get(protocol.REQUESTING_ORIGIN_HEADER) or headers.get("origin") or ""

    return RequestContext(
        role=await container.options.get_site_role(),
        principal=resolve_admin(headers.get("authorization"), container.settings.admin_token),
        token=token.strip(),
        origin=origin.strip(),
        request_id=getattr(request.state, "request_id", ""),
    )


ContextDep = Annotated[RequestContext, Depends(get_request_context)]


async def require_admin(ctx: ContextDep) -> RequestContext:
    """Require an administrator session."""
    if not ctx.is_admin:
        raise AdminRequiredError()
    return ctx


async def authorize_peer(ctx: ContextDep, container: ContainerDep) -> AuthResult:
    """Run the auth gate for peer endpoints."""
    return await container.auth.authorize(ctx)


AdminDep = Annotated[RequestContext, Depends(require_admin)]
PeerDep = Annotated[AuthResult, Depends(authorize_peer)]
