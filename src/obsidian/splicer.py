"""
Two-phase document splicing around an in-flight definition request.
"""

from src.ai.models import DefinitionFailure, DefinitionResult, DefinitionSuccess
from src.obsidian.frontmatter import strip_frontmatter

PLACEHOLDER = "Loading..."


def begin_update(original_text: str, new_metadata_text: str) -> str:
    """Stage reconciled front matter + stripped body + placeholder.

    Always built from the reconciled text; the original block is dropped.
    """
    return new_metadata_text + strip_frontmatter(original_text) + PLACEHOLDER


def result_text(result: DefinitionResult | str) -> str:
    """Resolve a tagged result into the text that goes into the note."""
    if isinstance(result, (DefinitionSuccess, DefinitionFailure)):
        return result.as_document_text()
    if isinstance(result, str):
        return result
    raise TypeError(f"Unsupported definition result: {type(result).__name__}")


def complete_update(staged_text: str, result: DefinitionResult | str) -> str:
    """
    プレースホルダーを結果で 1 回だけ置換する

    プレースホルダーが見つからない場合（ユーザーが削除したなど）は末尾に追記する。
    置換対象は最後の出現位置。ステージ時に末尾へ追加したものがそれに当たる。
    """
    replacement = result_text(result)

    head, sep, tail = staged_text.rpartition(PLACEHOLDER)
    if not sep:
        return staged_text + replacement
    return head + replacement + tail
