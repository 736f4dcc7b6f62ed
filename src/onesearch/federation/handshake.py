"""Trust handshake between a governing node and a candidate brand site.

Before a brand site is added to (or edited in) the registry, the governing
node calls the candidate's health-check endpoint with the candidate's shared
token and its own URL as the requesting origin:

    GET {url}/wp-json/onesearch/v1/health-check
    X-OneSearch-Token: <candidate token>
    X-OneSearch-Requesting-Origin: <governing url>

Outcomes:
- {"success": true}                               -> pass
- {"success": false, "code": "already_connected"} -> HandshakeConflict
- anything else, non-200 or network error         -> HandshakeFailure

There are no retries. The brand side of the exchange is answered by
``answer_health_check``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
import orjson

from onesearch.errors import HandshakeConflict, HandshakeFailure
from onesearch.federation import protocol
from onesearch.models import BrandSite, host_of, normalize_url
from onesearch.storage.options import NodeOptions

logger = logging.getLogger(__name__)


@dataclass
class HandshakeResult:
    """Outcome of a single health-check call."""

    success: bool
    code: str | None = None
    message: str | None = None
    status_code: int | None = None

    @property
    def already_connected(self) -> bool:
        return self.code == protocol.ALREADY_CONNECTED


class TrustHandshake:
    """Runs the pre-registration health check against a candidate site."""

    def __init__(self, client: httpx.AsyncClient, origin: str, user_agent: str = "OneSearch"):
        self.client = client
        self.origin = normalize_url(origin)
        self.user_agent = user_agent

    async def check(self, url: str, api_key: str) -> HandshakeResult:
        """Call the candidate's health check and report the raw outcome."""
        endpoint = protocol.endpoint(url, protocol.HEALTH_CHECK)
        headers = {
            "Accept": "application/json",
            protocol.TOKEN_HEADER: api_key,
            protocol.REQUESTING_ORIGIN_HEADER: self.origin,
            "User-Agent": self.user_agent,
        }

        try:
            response = await self.client.get(endpoint, headers=headers)
        except httpx.TimeoutException:
            logger.warning(f"Health check to {url} timed out")
            return HandshakeResult(success=False, message="Health check timed out.")
        except httpx.RequestError as e:
            logger.warning(f"Health check to {url} failed: {e}")
            return HandshakeResult(success=False, message="Brand site is unreachable.")

        try:
            body: Any = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            body = None
        if not isinstance(body, dict):
            logger.warning(f"Health check to {url} returned a non-JSON body")
            return HandshakeResult(success=False, status_code=response.status_code)

        code = body.get("code") if isinstance(body.get("code"), str) else None
        message = body.get("message") if isinstance(body.get("message"), str) else None
        success = response.status_code == 200 and body.get("success") is True

        return HandshakeResult(
            success=success,
            code=code,
            message=message,
            status_code=response.status_code,
        )

    async def verify(self, site: BrandSite) -> None:
        """Require a passing handshake with ``site``.

        Raises:
            HandshakeConflict: The site is paired with another governing node.
            HandshakeFailure: Unreachable, wrong token or unexpected reply.
        """
        result = await self.check(site.url, site.api_key)
        if result.already_connected:
            logger.info(f"Brand site {site.url} is already connected elsewhere")
            raise HandshakeConflict()
        if not result.success:
            logger.info(
                f"Health check with {site.url} failed "
                f"(status={result.status_code}, code={result.code})"
            )
            raise HandshakeFailure()
        logger.info(f"Health check with {site.url} passed")


async def answer_health_check(options: NodeOptions, requesting_origin: str) -> dict[str, Any]:
    """Brand-side reply to an authenticated health check.

    The first governing node to complete a health check becomes this brand
    node's governing site. A later check from a different host is refused
    with ``already_connected`` until the pairing is released, as is a check
    that names no origin at all.
    """
    origin_host = host_of(requesting_origin)
    governing_url = await options.get_parent_site_url()

    if governing_url and host_of(governing_url) != origin_host:
        return {
            "success": False,
            "code": protocol.ALREADY_CONNECTED,
            "message": "This site is already connected to a different governing site.",
        }

    if not governing_url and origin_host:
        await options.set_parent_site_url(requesting_origin)

    return {"success": True, "message": "Health check passed successfully."}
