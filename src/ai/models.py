"""
AI 処理用のデータモデル
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class AIModelConfig(BaseModel):
    """AI モデル設定"""

    model_name: str = "models/gemini-2.5-flash"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1, le=8192)
    top_p: float = Field(default=0.8, ge=0.0, le=1.0)
    top_k: int = Field(default=40, ge=1, le=100)


class DefinitionRequest(BaseModel):
    """定義生成リクエスト"""

    title: str
    tags_context: str = ""
    credential: SecretStr = SecretStr("")

    model_config = ConfigDict(frozen=True)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """タイトルは空にできない"""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class DefinitionSuccess(BaseModel):
    """生成された定義"""

    kind: Literal["success"] = "success"
    text: str
    model_used: str | None = None
    processing_time_ms: int = 0

    model_config = ConfigDict(frozen=True)

    def as_document_text(self) -> str:
        return self.text


class DefinitionFailure(BaseModel):
    """生成失敗。説明文はそのままノートに挿入される"""

    kind: Literal["failure"] = "failure"
    description: str
    error_type: str = "Exception"
    processing_time_ms: int = 0

    model_config = ConfigDict(frozen=True)

    def as_document_text(self) -> str:
        return self.description


DefinitionResult = DefinitionSuccess | DefinitionFailure


class APIUsageInfo(BaseModel):
    """API 使用量情報"""

    requests_count: int = 0
    failed_requests: int = 0
    last_updated: datetime = Field(default_factory=datetime.now)

    def add_request(self, succeeded: bool = True) -> None:
        """使用量を追加"""
        self.requests_count += 1
        if not succeeded:
            self.failed_requests += 1
        self.last_updated = datetime.now()
