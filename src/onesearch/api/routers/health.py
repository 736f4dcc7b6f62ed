"""Liveness and readiness probes for a OneSearch node.

- /health/live  - process is running
- /health/ready - option store and cache backend answer
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

from onesearch.api.deps import ContainerDep
from onesearch.storage.options import OptionKeys

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health/live")
async def liveness() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness(container: ContainerDep) -> ORJSONResponse:
    """Readiness probe: the option store and cache backend must be reachable."""
    start = time.monotonic()
    body: dict[str, Any] = {"insecure_secrets": container.secrets.insecure}
    try:
        await container.store.get(OptionKeys.SITE_ROLE)
    except Exception as e:
        logger.warning(f"Option store not ready: {e}")
        body.update(status="unhealthy", message="Option store unreachable")
        return ORJSONResponse(status_code=503, content=body)

    if not await container.cache.backend.health_check():
        logger.warning("Cache backend not ready")
        body.update(status="unhealthy", message="Cache backend unreachable")
        return ORJSONResponse(status_code=503, content=body)

    body.update(status="healthy", latency_ms=round((time.monotonic() - start) * 1000, 2))
    return ORJSONResponse(content=body)
