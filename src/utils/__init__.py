"""Utility modules for Glossa"""

from .logger import (
    get_logger,
    log_api_usage,
    mask_secret,
    sanitize_log_content,
    setup_logging,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_api_usage",
    "mask_secret",
    "sanitize_log_content",
]
