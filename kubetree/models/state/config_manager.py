"""Settings persistence backed by a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from kubetree.models.state.tree_settings import (
    ConfigLoadError,
    ConfigSaveError,
    TreeSettings,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """Load and save :class:`TreeSettings` as YAML.

    A missing settings file is not an error: defaults are returned. A file
    that exists but cannot be parsed or validated raises
    :class:`ConfigLoadError` so callers can decide whether to fall back.
    """

    DEFAULT_PATH = Path("~/.config/kubetree/settings.yaml")

    @classmethod
    def resolve_path(cls, path: str | Path | None = None) -> Path:
        return Path(path or cls.DEFAULT_PATH).expanduser()

    @classmethod
    def load(cls, path: str | Path | None = None) -> TreeSettings:
        """Load settings from ``path`` (or the default location).

        Raises:
            ConfigLoadError: If the file cannot be read, parsed or validated.
        """
        settings_path = cls.resolve_path(path)
        if not settings_path.exists():
            logger.debug("Settings file %s not found, using defaults", settings_path)
            return TreeSettings()

        try:
            raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigLoadError(f"Failed to read settings from {settings_path}: {exc}") from exc

        if raw is None:
            return TreeSettings()
        if not isinstance(raw, dict):
            raise ConfigLoadError(
                f"Settings file {settings_path} must contain a mapping, got {type(raw).__name__}"
            )

        try:
            settings = TreeSettings.model_validate(raw)
        except ValidationError as exc:
            raise ConfigLoadError(f"Invalid settings in {settings_path}: {exc}") from exc

        logger.info("Loaded settings from %s", settings_path)
        return settings

    @classmethod
    def save(cls, settings: TreeSettings, path: str | Path | None = None) -> Path:
        """Write ``settings`` as YAML and return the path written.

        Raises:
            ConfigSaveError: If the file cannot be written.
        """
        settings_path = cls.resolve_path(path)
        try:
            settings_path.parent.mkdir(parents=True, exist_ok=True)
            settings_path.write_text(
                yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=True),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigSaveError(f"Failed to save settings to {settings_path}: {exc}") from exc

        logger.info("Saved settings to %s", settings_path)
        return settings_path
