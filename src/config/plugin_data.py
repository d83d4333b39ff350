"""
Persisted plugin settings (API key and status value).
ユーザーが変更した設定を data.json に保存し、起動時に読み込む
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiofiles
import structlog
from pydantic import BaseModel, SecretStr, field_serializer, field_validator

from src.config.settings import DEFAULT_STATUS_VALUE, Settings, check_status_value
from src.utils.error_handler import critical_operation, safe_with_default

logger = structlog.get_logger(__name__)


class PluginData(BaseModel):
    """data.json に保存される設定値"""

    api_key: SecretStr = SecretStr("")
    definition_status: str = DEFAULT_STATUS_VALUE

    @field_validator("definition_status")
    @classmethod
    def _status_single_line(cls, value: str) -> str:
        return check_status_value(value)

    @field_serializer("api_key", when_used="json")
    def _dump_api_key(self, value: SecretStr) -> str:
        return value.get_secret_value()


class PluginDataStore:
    """Load and save ``PluginData`` as a flat JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @safe_with_default("read plugin data", default_value={})
    async def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        async with aiofiles.open(self.path, encoding="utf-8") as f:
            raw = json.loads(await f.read())

        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return raw

    @safe_with_default("validate plugin data", default_value=None)
    def _validate(self, known: dict[str, Any]) -> PluginData | None:
        return PluginData.model_validate({**PluginData().model_dump(), **known})

    async def load(self) -> PluginData:
        """Return defaults overlaid with whatever the file holds."""
        raw = await self._read_raw()
        known = {k: v for k, v in raw.items() if k in PluginData.model_fields}
        data = self._validate(known)
        if data is None:
            data = PluginData()

        logger.debug(
            "Plugin data loaded",
            path=str(self.path),
            fields=sorted(known),
            api_key_length=len(data.api_key.get_secret_value()),
        )
        return data

    @critical_operation("save plugin data")
    async def save(self, data: PluginData) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(data.model_dump_json(indent=2))

        logger.info("Plugin data saved", path=str(self.path))

    @staticmethod
    def apply(settings: Settings, data: PluginData) -> Settings:
        """Overlay non-empty persisted values on env-derived settings."""
        updates: dict[str, Any] = {}
        if data.api_key.get_secret_value():
            updates["gemini_api_key"] = data.api_key
        if data.definition_status.strip():
            updates["definition_status"] = data.definition_status.strip()

        return settings.model_copy(update=updates) if updates else settings
