"""
Obsidian note handling: front matter, splicing and editor adapters
"""

from src.obsidian.editor import Editor, InMemoryEditor, MetadataIndex, NoteFileEditor
from src.obsidian.frontmatter import (
    DUPLICATE_KEY_POLICY,
    FRONTMATTER_MARKER,
    MALFORMED_LINE_POLICY,
    FrontmatterBlock,
    parse_frontmatter,
    parse_tags,
    reconcile_frontmatter,
    split_frontmatter,
    strip_frontmatter,
)
from src.obsidian.splicer import PLACEHOLDER, begin_update, complete_update

__all__ = [
    # Front matter
    "FrontmatterBlock",
    "FRONTMATTER_MARKER",
    "MALFORMED_LINE_POLICY",
    "DUPLICATE_KEY_POLICY",
    "parse_frontmatter",
    "parse_tags",
    "reconcile_frontmatter",
    "split_frontmatter",
    "strip_frontmatter",
    # Splicing
    "PLACEHOLDER",
    "begin_update",
    "complete_update",
    # Editors
    "Editor",
    "InMemoryEditor",
    "NoteFileEditor",
    "MetadataIndex",
]
