"""Tests for validated records and sanitizers."""

import pytest

from onesearch.errors import ValidationError
from onesearch.models import (
    AlgoliaCredentials,
    BrandSite,
    SearchSettings,
    SiteRole,
    host_of,
    normalize_url,
    sanitize_text,
    sanitize_url,
    sanitize_url_list,
    unique_urls,
    validate_brand_site,
)


class TestSiteRole:
    """Test SiteRole parsing."""

    def test_values(self) -> None:
        assert SiteRole.UNSET.value == "unset"
        assert SiteRole.BRAND.value == "brand-site"
        assert SiteRole.GOVERNING.value == "governing-site"

    def test_parse_known(self) -> None:
        assert SiteRole.parse("governing-site") == SiteRole.GOVERNING

    def test_parse_unknown_is_unset(self) -> None:
        assert SiteRole.parse(None) == SiteRole.UNSET
        assert SiteRole.parse("consumer") == SiteRole.UNSET
        assert SiteRole.parse(3) == SiteRole.UNSET


class TestUrlHelpers:
    """Test URL normalization and sanitizing."""

    def test_normalize_adds_trailing_slash(self) -> None:
        assert normalize_url("https://brand.example") == "https://brand.example/"

    def test_normalize_collapses_slashes(self) -> None:
        assert normalize_url("  https://brand.example/// ") == "https://brand.example/"

    def test_normalize_is_idempotent(self) -> None:
        for url in ("https://a.example", "https://a.example/", "http://a.example/path//"):
            assert normalize_url(normalize_url(url)) == normalize_url(url)

    def test_sanitize_url_rejects_other_schemes(self) -> None:
        assert sanitize_url("javascript:alert(1)") == ""
        assert sanitize_url("ftp://files.example") == ""
        assert sanitize_url(42) == ""

    def test_sanitize_url_strips_whitespace(self) -> None:
        assert sanitize_url(" https://a.example/x ") == "https://a.example/x"

    def test_sanitize_url_list(self) -> None:
        values = ["https://a.example/", "data:text/html,x", None, "http://b.example"]
        assert sanitize_url_list(values) == ["https://a.example/", "http://b.example"]

    def test_sanitize_url_list_accepts_mapping(self) -> None:
        assert sanitize_url_list({"0": "https://a.example/"}) == ["https://a.example/"]

    def test_sanitize_url_list_rejects_scalars(self) -> None:
        assert sanitize_url_list("https://a.example/") == []

    def test_host_of(self) -> None:
        assert host_of("https://Brand.Example:8443/path") == "brand.example"
        assert host_of("") is None
        assert host_of("not a url") is None

    def test_unique_urls(self) -> None:
        urls = ["https://a.example", "https://a.example/", "https://b.example"]
        assert unique_urls(urls) == ["https://a.example/", "https://b.example/"]


class TestSanitizeText:
    """Test free-text sanitizing."""

    def test_strips_tags_and_octets(self) -> None:
        assert sanitize_text("<b>App</b>%20ID\n ") == "AppID"

    def test_non_string(self) -> None:
        assert sanitize_text(None) == ""


class TestValidateBrandSite:
    """Test structural validation of brand-site input."""

    def test_valid(self) -> None:
        site = validate_brand_site(
            {"name": " Brand ", "url": "https://brand.example", "api_key": "token"}
        )
        assert site.name == "Brand"
        assert site.url == "https://brand.example/"
        assert site.api_key == "token"
        assert site.id is None

    def test_accepts_camel_case_key(self) -> None:
        site = validate_brand_site({"name": "B", "url": "https://b.example", "apiKey": "t"})
        assert site.api_key == "t"

    def test_all_fields_reported(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_brand_site({})
        assert set(exc_info.value.errors) == {"name", "url", "api_key"}
        assert exc_info.value.to_dict()["data"]["errors"] == exc_info.value.errors

    def test_name_at_limit(self) -> None:
        site = validate_brand_site({"name": "n" * 20, "url": "https://b.example", "api_key": "t"})
        assert len(site.name) == 20

    def test_name_too_long(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_brand_site({"name": "n" * 21, "url": "https://b.example", "api_key": "t"})
        assert set(exc_info.value.errors) == {"name"}
        assert exc_info.value.errors["name"] == "Site Name must be 20 characters or fewer."

    def test_non_http_url(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_brand_site({"name": "B", "url": "ftp://b.example", "api_key": "t"})
        assert set(exc_info.value.errors) == {"url"}

    def test_accepts_existing_model(self) -> None:
        site = BrandSite(name="B", url="https://b.example", api_key="t")
        assert validate_brand_site(site).url == "https://b.example/"

    def test_public_dict_hides_token(self) -> None:
        site = BrandSite(id="1", name="B", url="https://b.example", api_key="t")
        assert site.public_dict() == {"id": "1", "name": "B", "url": "https://b.example/"}


class TestAlgoliaCredentials:
    """Test credentials records."""

    def test_all_null_is_valid(self) -> None:
        credentials = AlgoliaCredentials()
        assert credentials.is_configured is False
        assert credentials.model_dump() == {"app_id": None, "write_key": None, "admin_key": None}

    def test_from_payload_sanitizes(self) -> None:
        credentials = AlgoliaCredentials.from_payload(
            {"app_id": "<i>APP</i>", "write_key": 123, "admin_key": "  "}
        )
        assert credentials.app_id == "APP"
        assert credentials.write_key is None
        assert credentials.admin_key is None
        assert credentials.is_configured is True


class TestSearchSettings:
    """Test search settings records."""

    def test_disabled(self) -> None:
        settings = SearchSettings.disabled()
        assert settings.algolia_enabled is False
        assert settings.searchable_sites == []

    def test_from_payload(self) -> None:
        settings = SearchSettings.from_payload(
            {"algolia_enabled": True, "searchable_sites": ["https://a.example/", "bad"]}
        )
        assert settings.algolia_enabled is True
        assert settings.searchable_sites == ["https://a.example/"]
