"""
Mock definition backend for development and testing
"""

import asyncio
import hashlib
import re

from src.ai.gemini_client import GeminiAPIError
from src.ai.models import APIUsageInfo
from src.utils.mixins import LoggerMixin

_SUBJECT_PATTERN = re.compile(r"definition of (?P<title>.+?)(?: in the context of |\.\n)")


class MockDefinitionClient(LoggerMixin):
    """Offline stand-in for ``GeminiClient`` that returns canned definitions"""

    model_name = "mock-gemini"

    def __init__(self, delay_seconds: float = 0.1, fail_with: str | None = None):
        self.delay_seconds = delay_seconds
        self.fail_with = fail_with
        self.api_usage = APIUsageInfo()
        self.prompts: list[str] = []

        self._templates = [
            "{title}: a core concept, summarised here as a short flashcard-ready definition.",
            "{title} is a term whose meaning depends on its field; this is a mock definition.",
            "{title} (mock): one coherent sentence describing the idea for review.",
        ]

        self.logger.info("Mock definition client initialized", delay=delay_seconds)

    async def generate_text(self, prompt: str) -> str:
        """Return a deterministic definition chosen from the prompt hash"""
        self.prompts.append(prompt)

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        if self.fail_with is not None:
            self.api_usage.add_request(succeeded=False)
            raise GeminiAPIError(self.fail_with, error_code="mock")

        content_hash = hashlib.md5(prompt.encode(), usedforsecurity=False).hexdigest()
        template = self._templates[int(content_hash[:8], 16) % len(self._templates)]

        match = _SUBJECT_PATTERN.search(prompt)
        title = match.group("title").strip() if match else "This note"

        self.api_usage.add_request()
        self.logger.debug("Mock definition generated", title=title)
        return template.format(title=title)

    def get_usage_info(self) -> APIUsageInfo:
        return self.api_usage
