"""Error taxonomy for OneSearch.

Every failure a component can report is a subclass of OneSearchError, which
carries a stable machine-readable code (the peer protocol's error code), a
human-readable message and an HTTP status used by the REST layer.
"""

from __future__ import annotations

from typing import Any


class OneSearchError(Exception):
    """Base class for all OneSearch domain errors."""

    code = "onesearch_error"
    status = 500
    default_message = "An unexpected error occurred."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status: int | None = None,
        data: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status
        self.data = data or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the protocol error shape."""
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status, **self.data},
        }


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------


class ValidationError(OneSearchError):
    """Malformed registry input, reported per field."""

    code = "onesearch_invalid_site"
    status = 400
    default_message = "The brand site is invalid."

    def __init__(self, errors: dict[str, str], message: str | None = None):
        self.errors = dict(errors)
        super().__init__(message or next(iter(self.errors.values()), None))
        self.data["errors"] = self.errors


class DuplicateSiteError(ValidationError):
    """A brand site with the same URL is already registered."""

    code = "duplicate_site_url"

    def __init__(self, url: str):
        super().__init__({"url": "Site URL already exists. Please use a different URL."})
        self.url = url


class SiteNotFoundError(OneSearchError):
    """No brand site exists at the given registry index."""

    code = "onesearch_site_not_found"
    status = 404

    def __init__(self, index: int):
        super().__init__(f"No brand site at index {index}.")
        self.index = index


# -----------------------------------------------------------------------------
# Handshake
# -----------------------------------------------------------------------------


class HandshakeError(OneSearchError):
    """Base class for handshake outcomes that block a registry mutation."""

    status = 502


class HandshakeConflict(HandshakeError):
    """The candidate brand site is already paired with another governing node."""

    code = "already_connected"
    status = 409
    default_message = "The brand site is already connected to a different governing site."


class HandshakeFailure(HandshakeError):
    """The candidate is unreachable or rejected the presented API key."""

    code = "onesearch_health_check_failed"
    default_message = (
        "Health check failed. Please ensure the site is accessible and the API key is correct."
    )


# -----------------------------------------------------------------------------
# Credential proxy
# -----------------------------------------------------------------------------


class ProxyError(OneSearchError):
    """Base class for governing-node fetch failures."""

    status = 502


class ProxyNetworkError(ProxyError):
    """The governing node could not be reached or replied with a non-200."""

    code = "failed_to_connect"
    default_message = "Failed to connect to the governing site."

    def __init__(self, status: int | None = None, body: str = "", message: str | None = None):
        super().__init__(message, data={"peer_status": status, "body": body})
        self.peer_status = status
        self.body = body


class ProxyProtocolError(ProxyError):
    """The governing node replied with a body that is not a JSON object."""

    code = "invalid_response"
    default_message = "The governing site returned an invalid response."


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------


class AuthError(OneSearchError):
    """Missing or mismatched shared token."""

    code = "invalid_api_key"
    status = 403
    default_message = "Invalid or missing API key."


class AdminRequiredError(OneSearchError):
    """The route needs an administrator session."""

    code = "rest_forbidden"
    status = 401
    default_message = "Administrator access required."


# -----------------------------------------------------------------------------
# Secrets and storage
# -----------------------------------------------------------------------------


class CryptoError(OneSearchError):
    """A stored secret failed its integrity check and is unusable."""

    code = "onesearch_decrypt_failed"
    default_message = "Stored secret could not be decrypted."


class InsecureSecretError(CryptoError):
    """Fallback encryption secrets were requested in a production environment."""

    code = "onesearch_insecure_secret"
    default_message = "Encryption key and salt must be configured in production."


class RoleLockedError(OneSearchError):
    """The site role has already been chosen."""

    code = "onesearch_role_locked"
    status = 409

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Site role is already '{current}'; refusing to change it to '{requested}'."
        )
        self.current = current
        self.requested = requested


class StorageError(OneSearchError):
    """A persisted record does not match its expected shape."""

    code = "onesearch_invalid_record"

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored option '{key}' is malformed: {reason}")
        self.key = key


class RoleMismatchError(OneSearchError):
    """The endpoint is not served by a node with this role."""

    code = "onesearch_unauthorized_site"
    status = 403

    def __init__(self, required: str):
        super().__init__(f"This endpoint is only available on a {required}.")
        self.required = required


class UnknownRequesterError(OneSearchError):
    """The presented token does not identify a registered brand site."""

    code = "invalid_site"
    status = 400
    default_message = "Could not identify requesting site."
