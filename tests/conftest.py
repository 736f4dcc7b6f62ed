"""Global pytest configuration and fixtures.

Peers are simulated with ``httpx.MockTransport``; time is controlled with a
fake clock injected into the in-memory cache.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from onesearch.cache import CacheLayer, MemoryCache
from onesearch.config import Settings
from onesearch.federation.registry import SiteRegistry
from onesearch.security.secrets import SecretStore
from onesearch.storage import MemoryStore, NodeOptions

Handler = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockPeer:
    """Routes outbound requests to canned handlers and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def on(self, method: str, url: str, handler: Handler | None = None, **response: Any) -> None:
        """Answer ``method url`` with ``handler`` or with ``httpx.Response(**response)``."""
        if handler is None:
            status_code = response.pop("status_code", 200)
            handler = lambda request: httpx.Response(status_code, **response)  # noqa: E731
        self.routes[(method.upper(), url)] = handler

    def calls(self, method: str | None = None, url: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if (method is None or r.method == method.upper()) and (url is None or str(r.url) == url)
        ]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, str(request.url)))
        if handler is None:
            return httpx.Response(404, json={"code": "rest_no_route"})
        return handler(request)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        site_url="https://governing.example/",
        encryption_key="test-encryption-key",
        encryption_salt="test-encryption-salt",
        admin_token="admin-session-token",
        store_backend="memory",
        cache_backend="memory",
    )


@pytest.fixture
def secrets() -> SecretStore:
    return SecretStore("test-encryption-key", "test-encryption-salt")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def options(store: MemoryStore, secrets: SecretStore) -> NodeOptions:
    return NodeOptions(store, secrets)


@pytest.fixture
def registry(store: MemoryStore, secrets: SecretStore) -> SiteRegistry:
    return SiteRegistry(store, secrets)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> CacheLayer:
    return CacheLayer(MemoryCache(clock=clock))


@pytest.fixture
def peer() -> MockPeer:
    return MockPeer()


@pytest.fixture
async def http_client(peer: MockPeer) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=peer.transport) as client:
        yield client
