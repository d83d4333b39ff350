"""
AI処理モジュール
"""

from src.ai.definition import (
    DefinitionBackend,
    build_definition_prompt,
    create_definition_backend,
    generate_definition,
)
from src.ai.gemini_client import (
    GeminiAPIError,
    GeminiAuthenticationError,
    GeminiClient,
    RateLimitExceeded,
)
from src.ai.mock_client import MockDefinitionClient
from src.ai.models import (
    AIModelConfig,
    APIUsageInfo,
    DefinitionFailure,
    DefinitionRequest,
    DefinitionResult,
    DefinitionSuccess,
)

__all__ = [
    # クライアント
    "GeminiClient",
    "GeminiAPIError",
    "GeminiAuthenticationError",
    "RateLimitExceeded",
    "MockDefinitionClient",
    # モデル
    "AIModelConfig",
    "APIUsageInfo",
    "DefinitionRequest",
    "DefinitionResult",
    "DefinitionSuccess",
    "DefinitionFailure",
    # 定義生成
    "DefinitionBackend",
    "build_definition_prompt",
    "create_definition_backend",
    "generate_definition",
]
