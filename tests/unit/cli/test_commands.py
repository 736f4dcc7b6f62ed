"""Tests for the onesearch CLI."""

import httpx
import pytest
from typer.testing import CliRunner

from onesearch.cli import _runtime, app
from onesearch.config import Settings
from onesearch.container import build_container
from onesearch.storage import MemoryStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ONESEARCH_ENV", "test")
    monkeypatch.setenv("ONESEARCH_ENCRYPTION_KEY", "cli-key")
    monkeypatch.setenv("ONESEARCH_ENCRYPTION_SALT", "cli-salt")


@pytest.fixture
def shared_store(monkeypatch: pytest.MonkeyPatch) -> MemoryStore:
    """Keep option state across CLI invocations."""
    store = MemoryStore()

    def _build(settings: Settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        client = httpx.AsyncClient(transport=transport)
        return build_container(settings, store=store, http_client=client)

    monkeypatch.setattr(_runtime, "build_container", _build)
    return store


class TestRoleCommands:
    """Test `onesearch role`."""

    def test_show_default(self, shared_store: MemoryStore) -> None:
        result = runner.invoke(app, ["role", "show"])
        assert result.exit_code == 0
        assert result.output.strip() == "unset"

    def test_set_then_show(self, shared_store: MemoryStore) -> None:
        assert runner.invoke(app, ["role", "set", "governing-site"]).exit_code == 0
        assert runner.invoke(app, ["role", "show"]).output.strip() == "governing-site"

    def test_change_needs_force(self, shared_store: MemoryStore) -> None:
        runner.invoke(app, ["role", "set", "governing-site"])
        result = runner.invoke(app, ["role", "set", "brand-site"])
        assert result.exit_code == 1
        assert "--force" in result.output

        assert runner.invoke(app, ["role", "set", "brand-site", "--force"]).exit_code == 0
        assert runner.invoke(app, ["role", "show"]).output.strip() == "brand-site"

    def test_unknown_role(self, shared_store: MemoryStore) -> None:
        result = runner.invoke(app, ["role", "set", "hub"])
        assert result.exit_code == 2


class TestTokenCommands:
    """Test `onesearch token`."""

    def test_show_on_brand(self, shared_store: MemoryStore) -> None:
        runner.invoke(app, ["role", "set", "brand-site"])
        first = runner.invoke(app, ["token", "show"]).output.strip()
        assert len(first) == 128
        assert runner.invoke(app, ["token", "show"]).output.strip() == first

    def test_regenerate(self, shared_store: MemoryStore) -> None:
        runner.invoke(app, ["role", "set", "brand-site"])
        first = runner.invoke(app, ["token", "show"]).output.strip()
        result = runner.invoke(app, ["token", "regenerate", "--yes"])
        assert result.exit_code == 0
        assert result.output.strip() != first

    def test_refused_on_governing(self, shared_store: MemoryStore) -> None:
        runner.invoke(app, ["role", "set", "governing-site"])
        result = runner.invoke(app, ["token", "show"])
        assert result.exit_code == 1


class TestSecretCheck:
    """Test `onesearch secret check`."""

    def test_configured(self) -> None:
        result = runner.invoke(app, ["secret", "check"])
        assert result.exit_code == 0
        assert "configured" in result.output

    def test_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ONESEARCH_ENCRYPTION_KEY")
        result = runner.invoke(app, ["secret", "check"])
        assert result.exit_code == 1
        assert "Insecure" in result.output

    def test_production_refuses_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONESEARCH_ENV", "production")
        monkeypatch.delenv("ONESEARCH_ENCRYPTION_SALT")
        result = runner.invoke(app, ["secret", "check"])
        assert result.exit_code == 1
