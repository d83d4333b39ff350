"""Test configuration module"""

import json
from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from src.config import (
    DEFAULT_STATUS_VALUE,
    PluginData,
    PluginDataStore,
    get_settings,
    override_settings,
)


def test_config_import(monkeypatch) -> None:
    """設定が環境変数から正しく構築されることを検証する。"""
    monkeypatch.setenv("GEMINI_API_KEY", "test_api_key")
    monkeypatch.setenv("OBSIDIAN_VAULT_PATH", "/tmp/test_vault")
    monkeypatch.setenv("DEFINITION_STATUS", "Reviewed by AI")

    settings = get_settings(refresh=True)

    assert settings.gemini_api_key.get_secret_value() == "test_api_key"
    assert settings.obsidian_vault_path == Path("/tmp/test_vault")
    assert settings.definition_status == "Reviewed by AI"
    assert settings.environment == "testing"
    assert settings.is_testing


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY")

    settings = get_settings(refresh=True)

    assert settings.gemini_api_key.get_secret_value() == ""
    assert settings.definition_status == DEFAULT_STATUS_VALUE == "Definition by AI"
    assert settings.is_mock_mode is False


def test_override_settings_restores_cache() -> None:
    original = get_settings()

    with override_settings(definition_status="Temp") as patched:
        assert get_settings() is patched
        assert patched.definition_status == "Temp"

    assert get_settings() is original


class TestPluginDataStore:
    """Test persisted plugin settings"""

    @pytest.mark.asyncio
    async def test_missing_file_gives_defaults(self, tmp_path) -> None:
        data = await PluginDataStore(tmp_path / "data.json").load()

        assert data.api_key.get_secret_value() == ""
        assert data.definition_status == DEFAULT_STATUS_VALUE

    @pytest.mark.asyncio
    async def test_save_and_load_round_trip(self, tmp_path) -> None:
        store = PluginDataStore(tmp_path / "plugin" / "data.json")

        await store.save(PluginData(api_key=SecretStr("sk-test"), definition_status="AI"))
        loaded = await store.load()

        assert loaded.api_key.get_secret_value() == "sk-test"
        assert loaded.definition_status == "AI"
        raw = json.loads((tmp_path / "plugin" / "data.json").read_text(encoding="utf-8"))
        assert raw == {"api_key": "sk-test", "definition_status": "AI"}

    @pytest.mark.asyncio
    async def test_partial_file_is_merged_with_defaults(self, tmp_path) -> None:
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"api_key": "abc", "unknown": 1}), encoding="utf-8")

        data = await PluginDataStore(path).load()

        assert data.api_key.get_secret_value() == "abc"
        assert data.definition_status == DEFAULT_STATUS_VALUE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[1, 2]",
            '{"api_key": null, "definition_status": 5}',
            '{"definition_status": "Draft\\n---"}',
        ],
    )
    async def test_corrupt_file_falls_back_to_defaults(self, tmp_path, content) -> None:
        path = tmp_path / "data.json"
        path.write_text(content, encoding="utf-8")

        data = await PluginDataStore(path).load()

        assert data == PluginData()

    def test_apply_overlays_non_empty_values(self) -> None:
        settings = get_settings()

        merged = PluginDataStore.apply(
            settings, PluginData(api_key=SecretStr("from-file"), definition_status=" ")
        )

        assert merged.gemini_api_key.get_secret_value() == "from-file"
        assert merged.definition_status == settings.definition_status

    def test_apply_without_values_keeps_settings(self) -> None:
        settings = get_settings()

        assert PluginDataStore.apply(settings, PluginData(definition_status="")) is settings


def test_blank_status_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("DEFINITION_STATUS", "   ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings(refresh=True)

    assert settings.definition_status == DEFAULT_STATUS_VALUE
    assert settings.log_level == "DEBUG"


def test_resolve_note_path(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OBSIDIAN_VAULT_PATH", str(tmp_path / "vault"))
    (tmp_path / "here.md").write_text("x", encoding="utf-8")
    settings = get_settings(refresh=True)

    assert settings.resolve_note_path(Path("here.md")) == Path("here.md")
    assert settings.resolve_note_path(Path("Mitosis.md")) == tmp_path / "vault" / "Mitosis.md"


@pytest.mark.parametrize("status", ["AI\ndraft", "AI\r\n---"])
def test_status_with_line_break_is_rejected(monkeypatch, status) -> None:
    monkeypatch.setenv("DEFINITION_STATUS", status)

    with pytest.raises(ValidationError, match="line breaks"):
        get_settings(refresh=True)

    with pytest.raises(ValidationError, match="line breaks"):
        PluginData(definition_status=status)
