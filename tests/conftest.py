"""
共通フィクスチャと収集設定。

- テスト向けの環境変数を毎テスト自動設定（autouse）
- 設定キャッシュを毎テストでクリア
- ルートを `sys.path` に追加して `import src.*` を解決
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# プロジェクトルート（このファイルの親の親）をパスに追加
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """テスト用の環境変数を毎テストで設定。

    各テスト終了時に `monkeypatch` により自動で復元されます。
    実際の秘密情報は使用せず、最小限のダミー値を設定します。
    """
    from src.config import clear_settings_cache

    env: dict[str, str] = {
        "GEMINI_API_KEY": "test_api_key",
        "OBSIDIAN_VAULT_PATH": "/tmp/test_vault",
        "ENVIRONMENT": "testing",
        "LOG_FORMAT": "console",
    }

    for k, v in env.items():
        monkeypatch.setenv(k, v)
    for k in ("DEFINITION_STATUS", "ENABLE_MOCK_MODE", "MOCK_GEMINI_ENABLED"):
        monkeypatch.delenv(k, raising=False)

    clear_settings_cache()
    yield
    clear_settings_cache()


class FakeBackend:
    """Records prompts and returns a fixed text or raises a fixed error."""

    def __init__(
        self,
        text: str = "A definition.",
        error: Exception | None = None,
        on_call=None,
    ):
        self.text = text
        self.error = error
        self.on_call = on_call
        self.prompts: list[str] = []

    async def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.on_call is not None:
            await self.on_call()
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_backend_cls() -> type[FakeBackend]:
    return FakeBackend
