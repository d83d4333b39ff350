"""
Definition generation: one prompt, one backend call, one tagged result.
"""

import time
from typing import Protocol

import structlog
from pydantic import SecretStr

from src.ai.gemini_client import GeminiAPIError, GeminiClient
from src.ai.mock_client import MockDefinitionClient
from src.ai.models import (
    DefinitionFailure,
    DefinitionRequest,
    DefinitionResult,
    DefinitionSuccess,
)
from src.config import Settings, get_settings
from src.utils.logger import sanitize_log_content

logger = structlog.get_logger(__name__)

DEFINITION_PROMPT = (
    "Write me one coherent short definition of {title}{context}.\n"
    "Write the definition in a way I can use it for my flashcards."
)


class DefinitionBackend(Protocol):
    """Anything that can turn one prompt into one piece of text."""

    async def generate_text(self, prompt: str) -> str:
        """Send the prompt and return the generated text."""
        ...


def build_definition_prompt(title: str, tags_context: str) -> str:
    """Embed title and tags verbatim in the flashcard instruction."""
    context = f" in the context of {tags_context}" if tags_context else ""
    return DEFINITION_PROMPT.format(title=title, context=context)


def create_definition_backend(
    settings: Settings, credential: SecretStr | str | None = None
) -> DefinitionBackend:
    """Pick the mock backend in mock mode, otherwise a Gemini client.

    Raises ``GeminiAuthenticationError`` when no usable credential is configured.
    """
    if settings.is_mock_mode:
        return MockDefinitionClient()
    return GeminiClient(
        api_key=credential if credential is not None else settings.gemini_api_key
    )


def describe_failure(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _backend_model_name(backend: DefinitionBackend) -> str | None:
    name = getattr(backend, "model_name", None)
    if isinstance(name, str):
        return name
    name = getattr(getattr(backend, "model_config", None), "model_name", None)
    return name if isinstance(name, str) else None


async def generate_definition(
    request: DefinitionRequest, backend: DefinitionBackend | None = None
) -> DefinitionResult:
    """
    定義を生成する。失敗しても例外は送出せず DefinitionFailure を返す

    Args:
        request: タイトル・タグ・認証情報
        backend: 生成バックエンド（省略時は設定から作成）

    Returns:
        DefinitionSuccess または DefinitionFailure
    """
    start_time = time.time()
    prompt = build_definition_prompt(request.title, request.tags_context)

    try:
        if backend is None:
            backend = create_definition_backend(get_settings(), request.credential)

        text = await backend.generate_text(prompt)
        if not isinstance(text, str) or not text.strip():
            raise GeminiAPIError("Empty response from generation backend")

        processing_time = int((time.time() - start_time) * 1000)
        logger.info(
            "Definition generated",
            title=request.title,
            length=len(text),
            processing_time_ms=processing_time,
        )
        return DefinitionSuccess(
            text=text.strip(),
            model_used=_backend_model_name(backend),
            processing_time_ms=processing_time,
        )

    except Exception as e:
        processing_time = int((time.time() - start_time) * 1000)
        logger.error(
            "Failed to generate definition",
            title=request.title,
            error=sanitize_log_content(str(e), max_length=200),
            error_type=type(e).__name__,
        )
        return DefinitionFailure(
            description=describe_failure(e),
            error_type=type(e).__name__,
            processing_time_ms=processing_time,
        )
