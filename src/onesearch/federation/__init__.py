"""Federation module for OneSearch.

Links a governing node with its brand nodes:
- Site registry of brand sites (governing node)
- Trust handshake before a brand site is linked
- Credential proxy with caching (brand node)
- Best-effort cache notifications to brand sites
"""

from onesearch.federation.handshake import HandshakeResult, TrustHandshake, answer_health_check
from onesearch.federation.linker import SiteLinker
from onesearch.federation.notify import BrandNotifier
from onesearch.federation.proxy import CredentialProxy, ProxyResource
from onesearch.federation.registry import RegistryChange, RegistryTransition, SiteRegistry

__all__ = [
    "BrandNotifier",
    "CredentialProxy",
    "HandshakeResult",
    "ProxyResource",
    "RegistryChange",
    "RegistryTransition",
    "SiteLinker",
    "SiteRegistry",
    "TrustHandshake",
    "answer_health_check",
]
