"""Glossa: AI-generated definitions for Obsidian notes"""

__version__ = "0.1.0"
