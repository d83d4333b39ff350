"""Editor adapters: the host-side view of the currently open note."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import aiofiles
import structlog

from src.obsidian.frontmatter import TAGS_KEY, parse_tags
from src.utils.mixins import LoggerMixin

logger = structlog.get_logger(__name__)


class Editor(Protocol):
    """Synchronous, immediately consistent access to one open document."""

    @property
    def title(self) -> str | None:
        """Document name, or None when it cannot be determined."""
        ...

    @property
    def document_id(self) -> str:
        """Stable key for the document (used by the in-flight guard)."""
        ...

    def get_value(self) -> str:
        """Return the current document text."""
        ...

    def set_value(self, text: str) -> None:
        """Replace the document text."""
        ...


class InMemoryEditor:
    """Editor backed by a string; records every write."""

    def __init__(self, text: str, title: str | None, document_id: str | None = None):
        self._text = text
        self._title = title
        self._document_id = document_id or (title or "untitled")
        self.history: list[str] = []

    @property
    def title(self) -> str | None:
        return self._title

    @property
    def document_id(self) -> str:
        return self._document_id

    def get_value(self) -> str:
        return self._text

    def set_value(self, text: str) -> None:
        self._text = text
        self.history.append(text)


class NoteFileEditor(LoggerMixin):
    """Editor backed by a markdown note on disk.

    The content is cached after ``load``; every ``set_value`` goes straight to
    disk so each write is visible before the caller continues.
    """

    def __init__(self, path: Path | str, text: str = ""):
        self.path = Path(path)
        self._text = text
        self.write_count = 0

    @classmethod
    async def load(cls, path: Path | str) -> "NoteFileEditor":
        """ノートを読み込んでエディタを作成"""
        note_path = Path(path)
        async with aiofiles.open(note_path, encoding="utf-8") as f:
            text = await f.read()

        logger.info("Note loaded", file_path=str(note_path), size=len(text))
        return cls(note_path, text)

    @property
    def title(self) -> str | None:
        return self.path.stem or None

    @property
    def document_id(self) -> str:
        return str(self.path.resolve())

    def get_value(self) -> str:
        return self._text

    def set_value(self, text: str) -> None:
        # Editor.set_value は同期 API。プレースホルダーはリクエスト送信前にディスクへ反映されている必要がある
        self.path.write_text(text, encoding="utf-8")
        self._text = text
        self.write_count += 1
        self.logger.debug(
            "Note written",
            file_path=str(self.path),
            size=len(text),
            write_count=self.write_count,
        )


class MetadataIndex:
    """Pre-parsed front matter keyed by document id (the host's metadata cache)."""

    def __init__(self, entries: Mapping[str, Mapping[str, Any]] | None = None):
        self._entries: dict[str, Mapping[str, Any]] = dict(entries or {})

    def tags_for(self, document_id: str) -> list[str] | None:
        """
        インデックスに登録されたタグを返す

        Returns:
            タグのリスト。インデックスにエントリがなければ None
        """
        entry = self._entries.get(document_id)
        if entry is None:
            return None
        return parse_tags(entry.get(TAGS_KEY))
