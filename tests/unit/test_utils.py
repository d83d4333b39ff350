"""Test utils module functionality."""

import logging
from collections.abc import Iterator

import pytest

from src.utils.error_handler import critical_operation, handle_errors, safe_with_default
from src.utils.logger import get_logger, mask_secret, sanitize_log_content, setup_logging
from src.utils.mixins import LoggerMixin


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Iterator[None]:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    try:
        yield
    finally:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()


class TestLogger:
    """Test logging functionality."""

    def test_setup_logging_writes_plain_message_to_file(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test log file output uses raw message format."""
        monkeypatch.chdir(tmp_path)

        setup_logging()

        test_message = "logging format check"
        logging.getLogger("format-check").info(test_message)

        root_logger = logging.getLogger()
        file_handlers = [
            handler
            for handler in root_logger.handlers
            if isinstance(handler, logging.FileHandler)
        ]
        assert file_handlers, "FileHandler が設定されていません"

        for handler in file_handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "glossa.log"
        assert log_file.exists()
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines, "ログファイルが空です"
        assert lines[-1].endswith(test_message)

    def test_setup_logging_replaces_existing_handlers(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test handlers installed by a host do not block configuration."""
        monkeypatch.chdir(tmp_path)
        existing = logging.NullHandler()
        logging.getLogger().addHandler(existing)

        setup_logging()

        handlers = logging.getLogger().handlers
        assert existing not in handlers
        assert any(isinstance(h, logging.FileHandler) for h in handlers)

    def test_get_logger_returns_logger(self):
        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_logger_mixin(self):
        class Component(LoggerMixin):
            pass

        assert hasattr(Component().logger, "warning")

    def test_sanitize_redacts_keys(self):
        text = "key=AIzaSyA1234567890abcdefghijklmnopqrstu"

        sanitized = sanitize_log_content(text, max_length=200)

        assert "AIzaSy" not in sanitized
        assert "[REDACTED]" in sanitized

    @pytest.mark.parametrize(
        "secret", ["sk-abcdefghijklmnopqrstuvwx", "token: abcdefghijklmnopqrstuvwxyz"]
    )
    def test_sanitize_redacts_other_key_shapes(self, secret):
        assert sanitize_log_content(f"failed with {secret}", max_length=200) == (
            "failed with [REDACTED]"
        )

    def test_sanitize_truncates(self):
        assert sanitize_log_content("a " * 100, max_length=10).endswith("...")

    @pytest.mark.parametrize(
        ("secret", "expected"),
        [("", ""), ("abc", "***"), ("sk-123456", "*****3456")],
    )
    def test_mask_secret(self, secret, expected):
        assert mask_secret(secret) == expected


class TestErrorHandler:
    """Test error handling decorators."""

    def test_sync_default_is_returned(self):
        @safe_with_default("parse", default_value=[])
        def _fails():
            raise ValueError("bad")

        assert _fails() == []

    @pytest.mark.asyncio
    async def test_async_default_is_returned(self):
        @handle_errors("load", default_return={"fallback": True})
        async def _fails():
            raise OSError("disk")

        assert await _fails() == {"fallback": True}

    @pytest.mark.asyncio
    async def test_critical_operation_reraises(self):
        @critical_operation("save")
        async def _fails():
            raise OSError("disk full")

        with pytest.raises(OSError, match="disk full"):
            await _fails()

    def test_success_passes_through(self):
        @safe_with_default("noop", default_value=None)
        def _ok():
            return 42

        assert _ok() == 42
