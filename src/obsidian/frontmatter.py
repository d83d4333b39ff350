"""
Front matter parsing and status reconciliation.

The block is a line-oriented ``key: value`` region between two ``---`` marker
lines at the very top of a note. Values are kept as raw strings; no YAML
typing is applied.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import structlog

from src.config.settings import DEFAULT_STATUS_VALUE

logger = structlog.get_logger(__name__)

FRONTMATTER_MARKER = "---"
STATUS_KEY = "status"
TAGS_KEY = "tags"

# 不正な行（ ":" を含まない・キーが空）は読み飛ばす
MALFORMED_LINE_POLICY = "skip"
# 重複キーは最初に現れた位置を保ち、最後の値を採用する
DUPLICATE_KEY_POLICY = "last_wins_first_position"

_BOM = "\ufeff"


class FrontmatterBlock(Mapping[str, str]):
    """Ordered, read-only mapping of front matter keys to raw string values."""

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()):
        fields: dict[str, str] = {}
        for key, value in pairs:
            # dict keeps the first insertion position on reassignment
            fields[key] = value
        self._fields = fields

    def __getitem__(self, key: str) -> str:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FrontmatterBlock({list(self._fields.items())!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FrontmatterBlock):
            return list(self.items()) == list(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def tags(self) -> list[str]:
        """Tags from the ``tags`` field, split on commas."""
        return parse_tags(self._fields.get(TAGS_KEY))


def _is_marker(line: str) -> bool:
    return line.rstrip() == FRONTMATTER_MARKER


def _locate_block(text: str) -> tuple[list[str], str] | None:
    """Return (inner lines, body) for a leading block, or None."""
    if text.startswith(_BOM):
        text = text[len(_BOM) :]

    lines = text.splitlines(keepends=True)
    if not lines or not _is_marker(lines[0]):
        return None

    for index in range(1, len(lines)):
        if _is_marker(lines[index]):
            return lines[1:index], "".join(lines[index + 1 :])

    # 閉じマーカーがない場合はフロントマターなしとして扱う
    return None


def _parse_lines(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            logger.debug(
                "Skipping malformed front matter line",
                line=line,
                policy=MALFORMED_LINE_POLICY,
            )
            continue

        yield key, value.strip()


def split_frontmatter(text: str) -> tuple[FrontmatterBlock, str]:
    """Split a note into its front matter block and verbatim body."""
    located = _locate_block(text)
    if located is None:
        return FrontmatterBlock(), text

    inner, body = located
    return FrontmatterBlock(_parse_lines(inner)), body


def parse_frontmatter(text: str) -> FrontmatterBlock:
    """Parse the leading front matter block; empty when there is none."""
    block, _ = split_frontmatter(text)
    return block


def strip_frontmatter(text: str) -> str:
    """Remove the leading front matter block, keeping the body untouched."""
    _, body = split_frontmatter(text)
    return body


def parse_tags(value: Any) -> list[str]:
    """
    tags の値をトークンのリストに変換

    Args:
        value: カンマ区切り文字列、またはメタデータインデックス由来のリスト

    Returns:
        前後の空白を除いた空でないタグ
    """
    if value is None:
        return []

    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, Iterable):
        items = value
    else:
        items = [value]

    return [str(item).strip() for item in items if str(item).strip()]


def _format_field(key: str, value: str) -> str:
    return f"{key}: {value}" if value else f"{key}:"


def reconcile_frontmatter(block: Mapping[str, str], status_value: str) -> str:
    """
    status フィールドを反映したフロントマター文字列を生成

    既存の status は上書きも重複もしない。存在しない場合のみ末尾に追加する。

    Args:
        block: 解析済みフロントマター
        status_value: 追加する status の値

    Returns:
        マーカー行を含むフロントマター（末尾改行付き）
    """
    status_value = status_value.strip() or DEFAULT_STATUS_VALUE

    lines = [FRONTMATTER_MARKER]
    lines.extend(_format_field(key, value) for key, value in block.items())
    if STATUS_KEY not in block:
        lines.append(_format_field(STATUS_KEY, status_value))
    lines.append(FRONTMATTER_MARKER)

    return "\n".join(lines) + "\n"
