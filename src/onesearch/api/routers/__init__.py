"""API routers for OneSearch."""

from onesearch.api.routers import admin, health, peer

__all__ = ["admin", "health", "peer"]
