"""
Glossa settings

環境変数 / .env から読み込む設定と、そのプロセス内キャッシュ。
ユーザーが CLI で変更した値は plugin_data.py 側で上書きする。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATUS_VALUE = "Definition by AI"


def check_status_value(value: str) -> str:
    """status は front matter の 1 行に収まる値でなければならない"""
    if "\n" in value or "\r" in value:
        raise ValueError("status value must not contain line breaks")
    return value


class Settings(BaseSettings):
    """Settings for the definition command and its Gemini backend"""

    model_config = SettingsConfigDict(
        env_file=[".env.test", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    gemini_api_key: SecretStr = SecretStr("")

    # front matter に status が無いときに挿入する値
    definition_status: str = DEFAULT_STATUS_VALUE

    obsidian_vault_path: Path = Path("./vault")
    plugin_data_path: Path = Path("data.json")

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"
    environment: str = "personal"

    model_name: str = "models/gemini-2.5-flash"
    ai_temperature: float = 0.3
    ai_max_tokens: int = 1024

    enable_mock_mode: bool = False
    mock_gemini_enabled: bool = False

    @field_validator("definition_status")
    @classmethod
    def _status_single_line(cls, value: str) -> str:
        return check_status_value(value).strip() or DEFAULT_STATUS_VALUE

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")

    @property
    def is_testing(self) -> bool:
        return self.environment.lower() in ("testing", "test")

    @property
    def is_mock_mode(self) -> bool:
        """Gemini を呼ばずにモック定義を返すかどうか"""
        return self.enable_mock_mode or self.mock_gemini_enabled or self.is_development

    def resolve_note_path(self, note: Path) -> Path:
        """Resolve a note given relative to the vault when it is not found as-is."""
        if note.is_absolute() or note.exists():
            return note
        return self.obsidian_vault_path / note


_lock = RLock()
_cached: Settings | None = None


def get_settings(*, refresh: bool = False) -> Settings:
    """Return the process-wide ``Settings``, building it on first use.

    ``refresh=True`` re-reads the environment.
    """
    global _cached

    with _lock:
        if refresh or _cached is None:
            _cached = Settings()
        return _cached


def clear_settings_cache() -> None:
    global _cached

    with _lock:
        _cached = None


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Swap in a patched copy of the settings until the block exits.

    テストで status 値などを一時的に差し替えるために使う。
    """
    global _cached

    with _lock:
        previous = _cached
        patched = (previous or Settings()).model_copy(update=overrides)
        _cached = patched

    try:
        yield patched
    finally:
        with _lock:
            _cached = previous
