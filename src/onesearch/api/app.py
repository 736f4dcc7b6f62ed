"""FastAPI application factory for a OneSearch node.

Creates the application with:
- Peer endpoints under /wp-json/onesearch/v1 (token-authenticated)
- Administrator endpoints under the same namespace
- Liveness/readiness probes
- Request correlation for logs
- Protocol-shaped error responses
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from onesearch import __version__
from onesearch.api.errors import generic_exception_handler, onesearch_exception_handler
from onesearch.api.middleware import CorrelationMiddleware
from onesearch.api.routers import admin, health, peer
from onesearch.config import Settings
from onesearch.container import Container, build_container
from onesearch.errors import OneSearchError
from onesearch.observability import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    When ``container`` is given it is used as-is and left open on shutdown;
    otherwise one is built from ``settings`` at startup and closed at
    shutdown.
    """
    if settings is None:
        settings = container.settings if container is not None else Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(json_format=settings.log_json, level=settings.log_level)

        owned = app.state.container is None
        if owned:
            app.state.container = build_container(settings)
        logger.info(f"Starting OneSearch node ({settings.env}) at {settings.site_url or 'unset'}")

        yield

        logger.info("Shutting down OneSearch node")
        if owned:
            await app.state.container.aclose()
            app.state.container = None

    app = FastAPI(
        title=settings.app_name,
        description="Federated credential and search-settings sharing between sites",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(OneSearchError, cast(ExceptionHandler, onesearch_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(peer.router)
    app.include_router(admin.router)

    return app
