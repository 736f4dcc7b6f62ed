"""Validated records exchanged between OneSearch components.

Records are built at the storage and HTTP boundaries so components never
pass loosely-typed option payloads around.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from onesearch.errors import ValidationError

MAX_SITE_NAME_LENGTH = 20

_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"\s+")


class SiteRole(str, Enum):
    """Role of this node in the federation."""

    UNSET = "unset"
    BRAND = "brand-site"
    GOVERNING = "governing-site"

    @classmethod
    def parse(cls, value: Any) -> "SiteRole":
        """Map a stored option value to a role; unknown values are unset."""
        if isinstance(value, str):
            for role in cls:
                if role.value == value:
                    return role
        return cls.UNSET


# -----------------------------------------------------------------------------
# Sanitizers
# -----------------------------------------------------------------------------


def normalize_url(url: str) -> str:
    """Trim whitespace and guarantee exactly one trailing slash."""
    return url.strip().rstrip("/") + "/"


def is_http_url(url: str) -> bool:
    """Return True for an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def sanitize_url(value: Any) -> str:
    """Return a safe http(s) URL or an empty string."""
    if not isinstance(value, str):
        return ""
    url = "".join(value.split())
    return url if is_http_url(url) else ""


def sanitize_text(value: Any) -> str:
    """Strip tags, percent-encoded octets and redundant whitespace."""
    if not isinstance(value, str):
        return ""
    text = _TAG_RE.sub("", value)
    text = _OCTET_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_url_list(values: Any) -> list[str]:
    """Sanitize a list of URLs, dropping anything that is not http(s)."""
    if isinstance(values, Mapping):
        values = list(values.values())
    if not isinstance(values, list):
        return []
    urls = (sanitize_url(v) for v in values)
    return [u for u in urls if u]


def host_of(url: str | None) -> str | None:
    """Return the lowercase host of a URL, or None."""
    if not url:
        return None
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return None
    return host.lower() if host else None


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


class BrandSite(BaseModel):
    """A brand site registered with the governing node."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    url: str
    api_key: str = Field(validation_alias=AliasChoices("api_key", "apiKey"))

    @field_validator("url")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_url(value)

    def public_dict(self) -> dict[str, Any]:
        """Serialize without the shared token."""
        return {"id": self.id, "name": self.name, "url": self.url}


def validate_brand_site(data: Mapping[str, Any] | BrandSite) -> BrandSite:
    """Structural validation applied before any registry mutation.

    Raises:
        ValidationError: With one message per offending field.
    """
    if isinstance(data, BrandSite):
        data = data.model_dump()

    site_id = data.get("id")
    name = data.get("name")
    url = data.get("url")
    api_key = data.get("api_key", data.get("apiKey"))

    errors: dict[str, str] = {}

    name = name.strip() if isinstance(name, str) else ""
    if not name:
        errors["name"] = "Site Name is required."
    elif len(name) > MAX_SITE_NAME_LENGTH:
        errors["name"] = f"Site Name must be {MAX_SITE_NAME_LENGTH} characters or fewer."

    url = url.strip() if isinstance(url, str) else ""
    if not url:
        errors["url"] = "Site URL is required."
    elif not is_http_url(url):
        errors["url"] = "Enter a valid URL (must start with http or https)."

    api_key = api_key.strip() if isinstance(api_key, str) else ""
    if not api_key:
        errors["api_key"] = "API Key is required."

    if errors:
        raise ValidationError(errors)

    return BrandSite(
        id=site_id if isinstance(site_id, str) and site_id else None,
        name=name,
        url=url,
        api_key=api_key,
    )


class AlgoliaCredentials(BaseModel):
    """Search-engine credentials. Every field may be unset."""

    app_id: str | None = None
    write_key: str | None = None
    admin_key: str | None = None

    @property
    def is_configured(self) -> bool:
        return any((self.app_id, self.write_key, self.admin_key))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AlgoliaCredentials":
        """Build from an untrusted peer payload."""

        def _field(name: str) -> str | None:
            value = payload.get(name)
            if not isinstance(value, str):
                return None
            return sanitize_text(value) or None

        return cls(
            app_id=_field("app_id"),
            write_key=_field("write_key"),
            admin_key=_field("admin_key"),
        )


class SearchSettings(BaseModel):
    """Search scope configured for one brand site."""

    algolia_enabled: bool = False
    searchable_sites: list[str] = Field(default_factory=list)

    @classmethod
    def disabled(cls) -> "SearchSettings":
        return cls(algolia_enabled=False, searchable_sites=[])

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SearchSettings":
        """Build from an untrusted peer or admin payload."""
        return cls(
            algolia_enabled=bool(payload.get("algolia_enabled")),
            searchable_sites=sanitize_url_list(payload.get("searchable_sites")),
        )


def unique_urls(urls: Iterable[str]) -> list[str]:
    """Deduplicate URLs by normalized form, preserving order."""
    seen: dict[str, None] = {}
    for url in urls:
        seen.setdefault(normalize_url(url), None)
    return list(seen)
