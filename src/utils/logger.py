"""
Logging for Glossa

コンソールには rich、ファイル (logs/glossa.log) には素のメッセージを書き、
その上に structlog を載せる。
"""

import logging
import re
from pathlib import Path
from typing import Any, cast

import structlog
from rich.console import Console
from rich.logging import RichHandler

from src.config.settings import get_settings

LOG_FILE_NAME = "glossa.log"

# Gemini キー (AIza...)、OpenAI 形式 (sk-...)、key=/token=/secret= の値
_SECRET_PATTERNS = [
    re.compile(r"AIza[\w\-]{20,}"),
    re.compile(r"sk-[\w\-]{16,}"),
    re.compile(r'(?:api_?key|token|secret|key)[=:\s]*["\']?[\w\-\.]{20,}["\']?', re.IGNORECASE),
]


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_dir: Path | str = "logs") -> None:
    """Route stdlib logging to rich and a log file, then configure structlog."""
    settings = get_settings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        force=True,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            ),
            logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8"),
        ],
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(settings.log_format),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return cast("structlog.stdlib.BoundLogger", structlog.get_logger(name))


def log_api_usage(api_name: str, usage_data: dict[str, Any]) -> None:
    """Record one line of API usage (request counts, timings)."""
    get_logger("api_usage").info(f"{api_name} API usage", **usage_data)


def sanitize_log_content(content: str, max_length: int = 50) -> str:
    """ログに出す前に API キーらしき文字列を伏せ、長さを切り詰める"""
    sanitized = content
    for pattern in _SECRET_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."
    return sanitized


def mask_secret(value: str, visible: int = 4) -> str:
    """Show only the last few characters of a secret."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
