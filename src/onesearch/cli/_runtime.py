"""Helpers for CLI commands that operate on the node's option store."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from typing import TypeVar

from onesearch.config import Settings
from onesearch.container import Container, build_container
from onesearch.observability import LogContext

T = TypeVar("T")


def run_with_container(func: Callable[[Container], Awaitable[T]]) -> T:
    """Build a container from the environment, run ``func`` and close it."""

    async def _run() -> T:
        container = build_container(Settings())
        try:
            return await func(container)
        finally:
            await container.aclose()

    with LogContext(request_id=f"cli-{uuid.uuid4().hex[:8]}"):
        return asyncio.run(_run())
