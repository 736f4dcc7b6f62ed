"""Observability helpers for OneSearch.

Structured logging with request correlation.
"""

from onesearch.observability.logging import (
    LogContext,
    configure_logging,
    request_id_var,
)

__all__ = [
    "configure_logging",
    "LogContext",
    "request_id_var",
]
