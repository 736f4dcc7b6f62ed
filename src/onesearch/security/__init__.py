"""Security module for OneSearch.

Provides:
- SecretStore: symmetric encryption of credentials at rest
- AuthGate: shared-token / administrator check for peer endpoints
"""

from onesearch.security.auth import AuthGate, AuthResult, Principal, RequestContext
from onesearch.security.secrets import SecretStore, generate_token

__all__ = [
    "AuthGate",
    "AuthResult",
    "Principal",
    "RequestContext",
    "SecretStore",
    "generate_token",
]
