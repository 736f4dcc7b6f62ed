"""Tests for the trust handshake."""

import httpx
import pytest

from onesearch.errors import HandshakeConflict, HandshakeFailure
from onesearch.federation import TrustHandshake, answer_health_check, protocol
from onesearch.models import BrandSite
from onesearch.storage import NodeOptions

HEALTH_URL = "https://brand.example/wp-json/onesearch/v1/health-check"
SITE = BrandSite(name="Brand", url="https://brand.example", api_key="brand-token")


@pytest.fixture
def handshake(http_client: httpx.AsyncClient) -> TrustHandshake:
    return TrustHandshake(http_client, "https://governing.example", user_agent="test-agent")


class TestCheck:
    """Test the raw health-check call."""

    async def test_request_headers(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": True})
        await handshake.check(SITE.url, SITE.api_key)

        (request,) = peer.calls("GET", HEALTH_URL)
        assert request.headers[protocol.TOKEN_HEADER] == "brand-token"
        assert request.headers[protocol.REQUESTING_ORIGIN_HEADER] == "https://governing.example/"
        assert request.headers["user-agent"] == "test-agent"

    async def test_success(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": True, "message": "ok"})
        result = await handshake.check(SITE.url, SITE.api_key)
        assert result.success is True
        assert result.message == "ok"

    async def test_already_connected(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": False, "code": "already_connected"})
        result = await handshake.check(SITE.url, SITE.api_key)
        assert result.success is False
        assert result.already_connected is True

    async def test_success_needs_200(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, status_code=403, json={"success": True})
        result = await handshake.check(SITE.url, SITE.api_key)
        assert result.success is False
        assert result.status_code == 403

    async def test_non_json(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, text="<html>maintenance</html>")
        assert (await handshake.check(SITE.url, SITE.api_key)).success is False

    async def test_network_error(self, handshake: TrustHandshake, peer) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        peer.on("GET", HEALTH_URL, refuse)
        result = await handshake.check(SITE.url, SITE.api_key)
        assert result.success is False
        assert result.status_code is None

    async def test_timeout(self, handshake: TrustHandshake, peer) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        peer.on("GET", HEALTH_URL, slow)
        result = await handshake.check(SITE.url, SITE.api_key)
        assert result.success is False
        assert result.message == "Health check timed out."

    async def test_no_retries(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, status_code=500, json={})
        await handshake.check(SITE.url, SITE.api_key)
        assert len(peer.requests) == 1


class TestVerify:
    """Test the pass/raise wrapper used before registry mutations."""

    async def test_pass(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": True})
        await handshake.verify(SITE)

    async def test_conflict_is_distinct(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": False, "code": "already_connected"})
        with pytest.raises(HandshakeConflict) as exc_info:
            await handshake.verify(SITE)
        assert exc_info.value.code == "already_connected"

    async def test_other_code_is_failure(self, handshake: TrustHandshake, peer) -> None:
        peer.on("GET", HEALTH_URL, json={"success": False, "code": "invalid_api_key"})
        with pytest.raises(HandshakeFailure):
            await handshake.verify(SITE)

    async def test_unreachable_is_failure(self, handshake: TrustHandshake) -> None:
        with pytest.raises(HandshakeFailure):
            await handshake.verify(SITE)


class TestAnswerHealthCheck:
    """Test the brand side of the handshake."""

    async def test_first_pairing_records_origin(self, options: NodeOptions) -> None:
        reply = await answer_health_check(options, "https://governing.example/")
        assert reply["success"] is True
        assert await options.get_parent_site_url() == "https://governing.example"

    async def test_same_governing_host(self, options: NodeOptions) -> None:
        await options.set_parent_site_url("https://governing.example")
        reply = await answer_health_check(options, "https://GOVERNING.example/other")
        assert reply["success"] is True

    async def test_different_governing_host(self, options: NodeOptions) -> None:
        await options.set_parent_site_url("https://governing.example")
        reply = await answer_health_check(options, "https://intruder.example")
        assert reply == {
            "success": False,
            "code": "already_connected",
            "message": "This site is already connected to a different governing site.",
        }
        assert await options.get_parent_site_url() == "https://governing.example"

    async def test_no_origin(self, options: NodeOptions) -> None:
        reply = await answer_health_check(options, "")
        assert reply["success"] is True
        assert await options.get_parent_site_url() is None

    async def test_no_origin_when_paired(self, options: NodeOptions) -> None:
        await options.set_parent_site_url("https://other-governing.example")
        reply = await answer_health_check(options, "")
        assert reply["success"] is False
        assert reply["code"] == "already_connected"
        assert await options.get_parent_site_url() == "https://other-governing.example"
