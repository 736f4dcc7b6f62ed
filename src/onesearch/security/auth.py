"""Authentication gate for peer endpoints.

A single stateless check per request:

1. On a governing node, an administrator session is always allowed.
2. Otherwise the request must carry a shared token that matches, in
   constant time, the token this node trusts: its own token on a brand
   node, or the token of a registered brand site on a governing node.
3. Brand-node calls other than the health check must also come from the
   governing host this node is paired with.

No sessions are kept, no rate limiting, no retries.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from onesearch.errors import AuthError
from onesearch.models import BrandSite, SiteRole, host_of

if TYPE_CHECKING:
    from onesearch.federation.registry import SiteRegistry
    from onesearch.storage.options import NodeOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """An authenticated administrator of this node."""

    sub: str
    roles: tuple[str, ...] = ()

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles


@dataclass(frozen=True)
class RequestContext:
    """Per-request facts the gate and handlers need, built once per request."""

    role: SiteRole
    principal: Principal | None = None
    token: str = ""
    origin: str = ""
    request_id: str = field(default="", compare=False)

    @property
    def is_admin(self) -> bool:
        return self.principal is not None and self.principal.is_admin


@dataclass(frozen=True)
class AuthResult:
    """Why a request was allowed."""

    via_admin: bool = False
    site: BrandSite | None = None


def tokens_match(presented: str, expected: str) -> bool:
    """Constant-time comparison; empty tokens never match."""
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def resolve_admin(authorization: str | None, admin_token: str | None) -> Principal | None:
    """Map an ``Authorization: Bearer`` header to an administrator session."""
    if not authorization or not admin_token:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    if not tokens_match(credentials.strip(), admin_token):
        return None
    return Principal(sub="admin", roles=("admin",))


class AuthGate:
    """Validates inbound peer requests."""

    def __init__(self, options: NodeOptions, registry: SiteRegistry):
        self.options = options
        self.registry = registry

    async def authorize(self, ctx: RequestContext) -> AuthResult:
        """Allow the request or raise.

        Raises:
            AuthError: Missing or mismatched token (``invalid_api_key``).
        """
        if ctx.role == SiteRole.GOVERNING and ctx.is_admin:
            return AuthResult(via_admin=True)

        if not ctx.token:
            raise AuthError()

        if ctx.role == SiteRole.BRAND:
            if tokens_match(ctx.token, await self.options.get_api_key()):
                return AuthResult()
        elif ctx.role == SiteRole.GOVERNING:
            site = await self.registry.find_by_token(ctx.token)
            if site is not None:
                return AuthResult(site=site)

        logger.info(f"Rejected peer request from origin '{ctx.origin or 'unknown'}'")
        raise AuthError()

    async def require_governing_origin(self, ctx: RequestContext) -> None:
        """Brand nodes act only on calls from the governing host they are paired with.

        Raises:
            AuthError: No governing site is recorded, or the origin is another host.
        """
        governing_url = await self.options.get_parent_site_url()
        origin_host = host_of(ctx.origin)
        if governing_url and origin_host and host_of(governing_url) == origin_host:
            return
        logger.info(f"Rejected call from non-governing origin '{ctx.origin or 'unknown'}'")
        raise AuthError()
