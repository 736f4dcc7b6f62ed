"""Tests for the governing node's brand-site registry."""

import pytest

from onesearch.errors import DuplicateSiteError, SiteNotFoundError, StorageError, ValidationError
from onesearch.federation import RegistryTransition, SiteRegistry
from onesearch.storage import MemoryStore, OptionKeys


def _site(name: str = "Brand", url: str = "https://brand.example", key: str = "token") -> dict:
    return {"name": name, "url": url, "api_key": key}


class TestAdd:
    """Test adding brand sites."""

    async def test_first_site_transition(self, registry: SiteRegistry) -> None:
        change = await registry.add(_site())
        assert change.transition == RegistryTransition.FIRST_SITE_ADDED
        assert change.requires_reload is True
        assert [s.url for s in change.sites] == ["https://brand.example/"]

    async def test_second_site_no_transition(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        change = await registry.add(_site("Other", "https://other.example"))
        assert change.transition == RegistryTransition.NONE
        assert change.requires_reload is False
        assert len(change.sites) == 2

    async def test_assigns_id(self, registry: SiteRegistry) -> None:
        change = await registry.add(_site())
        assert change.sites[0].id

    async def test_token_encrypted_at_rest(
        self, registry: SiteRegistry, store: MemoryStore
    ) -> None:
        await registry.add(_site(key="plain-token"))
        assert b"plain-token" not in store.raw(OptionKeys.SHARED_SITES)
        assert (await registry.list())[0].api_key == "plain-token"

    async def test_duplicate_url_rejected(self, registry: SiteRegistry) -> None:
        await registry.add(_site(url="https://brand.example/"))
        with pytest.raises(DuplicateSiteError) as exc_info:
            await registry.add(_site("Again", "https://brand.example"))
        assert exc_info.value.code == "duplicate_site_url"
        assert "url" in exc_info.value.errors

    async def test_invalid_rejected_without_write(
        self, registry: SiteRegistry, store: MemoryStore
    ) -> None:
        with pytest.raises(ValidationError):
            await registry.add(_site(name="n" * 21))
        assert store.raw(OptionKeys.SHARED_SITES) is None


class TestUpdate:
    """Test editing brand sites."""

    async def test_keeps_id(self, registry: SiteRegistry) -> None:
        original = (await registry.add(_site())).sites[0]
        change = await registry.update(0, _site("Renamed", "https://renamed.example"))
        assert change.sites[0].id == original.id
        assert change.sites[0].name == "Renamed"
        assert change.transition == RegistryTransition.NONE

    async def test_same_url_allowed_for_same_index(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        change = await registry.update(0, _site(key="new-token"))
        assert change.sites[0].api_key == "new-token"

    async def test_url_of_other_site_rejected(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        await registry.add(_site("Other", "https://other.example"))
        with pytest.raises(DuplicateSiteError):
            await registry.update(1, _site("Other", "https://brand.example"))

    async def test_missing_index(self, registry: SiteRegistry) -> None:
        with pytest.raises(SiteNotFoundError):
            await registry.update(3, _site())

    async def test_other_records_untouched(
        self, registry: SiteRegistry, store: MemoryStore
    ) -> None:
        """Editing one site does not re-encrypt the others."""
        await registry.add(_site())
        await registry.add(_site("Other", "https://other.example"))
        before = (await store.get(OptionKeys.SHARED_SITES))[0]
        await registry.update(1, _site("Other", "https://other.example", "changed"))
        assert (await store.get(OptionKeys.SHARED_SITES))[0] == before


class TestRemove:
    """Test removing brand sites."""

    async def test_last_site_transition(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        removed, change = await registry.remove(0)
        assert removed.url == "https://brand.example/"
        assert change.transition == RegistryTransition.LAST_SITE_REMOVED
        assert change.sites == []
        assert await registry.is_empty() is True

    async def test_not_last_site(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        await registry.add(_site("Other", "https://other.example"))
        _, change = await registry.remove(0)
        assert change.transition == RegistryTransition.NONE
        assert [s.url for s in change.sites] == ["https://other.example/"]

    async def test_missing_index(self, registry: SiteRegistry) -> None:
        with pytest.raises(SiteNotFoundError):
            await registry.remove(0)


class TestLookups:
    """Test registry reads."""

    async def test_find_by_url_normalizes(self, registry: SiteRegistry) -> None:
        await registry.add(_site())
        assert await registry.find_by_url("https://brand.example///") is not None
        assert await registry.find_by_url("https://unknown.example") is None

    async def test_find_by_token(self, registry: SiteRegistry) -> None:
        await registry.add(_site(key="first"))
        await registry.add(_site("Other", "https://other.example", "second"))
        site = await registry.find_by_token("second")
        assert site is not None
        assert site.url == "https://other.example/"
        assert await registry.find_by_token("secon") is None
        assert await registry.find_by_token("") is None

    async def test_legacy_long_names_still_readable(
        self, registry: SiteRegistry, store: MemoryStore, secrets
    ) -> None:
        """Name length is enforced on mutation only."""
        await store.set(
            OptionKeys.SHARED_SITES,
            [{"name": "n" * 40, "url": "https://old.example/", "api_key": secrets.encrypt("t")}],
        )
        assert (await registry.list())[0].name == "n" * 40

    async def test_malformed_record(self, registry: SiteRegistry, store: MemoryStore) -> None:
        await store.set(OptionKeys.SHARED_SITES, [{"name": "x"}])
        with pytest.raises(StorageError):
            await registry.list()

    async def test_malformed_list(self, registry: SiteRegistry, store: MemoryStore) -> None:
        await store.set(OptionKeys.SHARED_SITES, {"0": {}})
        with pytest.raises(StorageError):
            await registry.list()
