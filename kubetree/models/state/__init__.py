"""Settings models and persistence."""

from kubetree.models.state.config_manager import ConfigManager
from kubetree.models.state.tree_settings import (
    ConfigError,
    ConfigLoadError,
    ConfigSaveError,
    TreeSettings,
)

__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigManager",
    "ConfigSaveError",
    "TreeSettings",
]
