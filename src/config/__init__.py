"""Configuration module for Glossa"""

from src.config.settings import (
    DEFAULT_STATUS_VALUE,
    Settings,
    clear_settings_cache,
    get_settings,
    override_settings,
)
from src.config.plugin_data import PluginData, PluginDataStore  # noqa: I001

__all__ = [
    "DEFAULT_STATUS_VALUE",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "override_settings",
    "PluginData",
    "PluginDataStore",
]
