"""Error responses for the OneSearch REST API.

Domain errors are rendered in the peer protocol's error shape:

    {"code": "invalid_api_key", "message": "...", "data": {"status": 403}}
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import ORJSONResponse

from onesearch.errors import OneSearchError

logger = logging.getLogger(__name__)


async def onesearch_exception_handler(request: Request, exc: OneSearchError) -> ORJSONResponse:
    """Exception handler for OneSearch domain errors."""
    return ORJSONResponse(status_code=exc.status, content=exc.to_dict())


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return ORJSONResponse(
        status_code=500,
        content={
            "code": "internal_server_error",
            "message": "An unexpected error occurred.",
            "data": {"status": 500},
        },
    )
