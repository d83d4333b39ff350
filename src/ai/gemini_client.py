"""
Google Gemini API クライアント
"""

import time
from typing import Any

from pydantic import SecretStr

try:
    import google.genai  # noqa: F401

    GENAI_AVAILABLE = True
except ImportError:
    GENAI_AVAILABLE = False

from src.ai.models import AIModelConfig, APIUsageInfo
from src.config import get_settings
from src.utils.logger import sanitize_log_content
from src.utils.mixins import LoggerMixin

_PLACEHOLDER_KEYS = {"your_gemini_api_key_here", "changeme"}


class GeminiAPIError(Exception):
    """Gemini API 関連のエラー"""

    def __init__(
        self, message: str, error_code: str | None = None, retryable: bool = False
    ):
        super().__init__(message)
        self.error_code = error_code
        self.retryable = retryable


class GeminiAuthenticationError(GeminiAPIError):
    """API キーが未設定・無効"""

    def __init__(self, message: str = "Gemini API key is not set"):
        super().__init__(message, error_code="auth", retryable=False)


class RateLimitExceeded(GeminiAPIError):
    """レート制限エラー"""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, error_code="429", retryable=True)


class GeminiClient(LoggerMixin):
    """Google Gemini API クライアント（google-genai SDK 使用）

    1 回の呼び出しにつき 1 リクエストのみ送信する。リトライ・レート制御は行わない。
    """

    def __init__(
        self,
        api_key: SecretStr | str | None = None,
        model_config: AIModelConfig | None = None,
    ):
        """
        Gemini クライアントの初期化

        Args:
            api_key: API キー（省略時は設定から取得）
            model_config: AI モデル設定
        """
        settings = get_settings()
        if api_key is None:
            api_key = settings.gemini_api_key
        if isinstance(api_key, SecretStr):
            api_key = api_key.get_secret_value()

        self.model_config = model_config or AIModelConfig(
            model_name=settings.model_name,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
        )
        self.api_usage = APIUsageInfo()
        self._client: Any | None = None

        self._initialize_client(api_key.strip())

    def _initialize_client(self, api_key: str) -> None:
        """Gemini API クライアントの初期化"""
        if not GENAI_AVAILABLE:
            raise ImportError(
                "google-genai が見つかりません。 `pip install google-genai` を実行してください"
            )

        if not api_key or api_key.lower() in _PLACEHOLDER_KEYS:
            self.logger.error("Gemini API key missing or placeholder")
            raise GeminiAuthenticationError()

        self.logger.info("Initializing Gemini client", api_key_length=len(api_key))

        try:
            from google import genai

            self._client = genai.Client(api_key=api_key)
        except Exception as e:
            self.logger.error("Failed to initialize Gemini client", error=str(e))
            raise GeminiAPIError(f"Failed to initialize Gemini client: {str(e)}") from e

        self.logger.info(
            "Gemini client initialized",
            model=self.model_config.model_name,
            temperature=self.model_config.temperature,
        )

    async def generate_text(self, prompt: str) -> str:
        """
        プロンプトを 1 回だけ送信し、生成テキストを返す

        Args:
            prompt: 送信するプロンプト（user ロールのメッセージ 1 件として送る）

        Returns:
            API レスポンステキスト

        Raises:
            GeminiAPIError: API 呼び出しエラー
        """
        if not self._client:
            raise GeminiAPIError("Gemini client not initialized")

        from google.genai import types

        generation_config = types.GenerateContentConfig(
            temperature=self.model_config.temperature,
            top_p=self.model_config.top_p,
            top_k=self.model_config.top_k,
            max_output_tokens=self.model_config.max_tokens,
        )
        contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]

        start_time = time.time()
        self.logger.debug(
            "Calling Gemini API",
            model=self.model_config.model_name,
            prompt_length=len(prompt),
        )

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_config.model_name,
                contents=contents,
                config=generation_config,
            )
        except Exception as e:
            self.api_usage.add_request(succeeded=False)
            raise self._translate_error(e) from e

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            self.api_usage.add_request(succeeded=False)
            raise GeminiAPIError("Empty response from Gemini API", error_code="empty")

        self.api_usage.add_request()
        self.logger.debug(
            "Gemini API call successful",
            response_length=len(text),
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
        return text.strip()

    def _translate_error(self, error: Exception) -> GeminiAPIError:
        """SDK の例外を GeminiAPIError 系に変換"""
        error_msg = str(error) or type(error).__name__
        code = getattr(error, "code", None)

        self.logger.error(
            "Gemini API call failed",
            error=sanitize_log_content(error_msg, max_length=200),
            error_type=type(error).__name__,
            status_code=code,
        )

        if code in (401, 403) or "api key" in error_msg.lower():
            return GeminiAuthenticationError(f"Gemini authentication failed: {error_msg}")
        if code == 429 or "429" in error_msg or "rate limit" in error_msg.lower():
            return RateLimitExceeded(f"Rate limit exceeded: {error_msg}")
        return GeminiAPIError(
            f"Gemini API call failed: {error_msg}",
            error_code=str(code) if code is not None else None,
            retryable=isinstance(code, int) and code >= 500,
        )

    def get_usage_info(self) -> APIUsageInfo:
        """API 使用量情報を取得"""
        return self.api_usage
