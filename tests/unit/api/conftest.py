"""Fixtures for exercising the HTTP surface with FastAPI's TestClient."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from onesearch.api.app import create_app
from onesearch.cache import MemoryCache
from onesearch.config import Settings
from onesearch.container import Container, build_container
from onesearch.storage import MemoryStore

ADMIN_HEADERS = {"Authorization": "Bearer admin-session-token"}


@pytest.fixture
def container(settings: Settings, peer, clock) -> Container:
    return build_container(
        settings,
        store=MemoryStore(),
        cache=MemoryCache(clock=clock),
        http_client=httpx.AsyncClient(transport=peer.transport),
    )


@pytest.fixture
def client(settings: Settings, container: Container) -> Iterator[TestClient]:
    app = create_app(settings, container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return dict(ADMIN_HEADERS)
