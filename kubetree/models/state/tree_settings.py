"""Tree engine settings models."""

from pydantic import BaseModel, ConfigDict, Field

from kubetree.constants.defaults import (
    DEBOUNCE_MS_DEFAULT,
    MAX_RECONNECT_ATTEMPTS_DEFAULT,
    PAGE_SIZE_DEFAULT,
    PROGRESSIVE_LOADING_DEFAULT,
    RECONNECT_BASE_DELAY_MS_DEFAULT,
    RESOURCE_KINDS_DEFAULT,
    WATCH_ENABLED_DEFAULT,
)
from kubetree.constants.limits import (
    DEBOUNCE_MS_MIN,
    PAGE_SIZE_MAX,
    PAGE_SIZE_MIN,
    RECONNECT_ATTEMPTS_MIN,
)


class TreeSettings(BaseModel):
    """Settings consumed by tree providers and watch managers."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Progressive loading
    page_size: int = Field(default=PAGE_SIZE_DEFAULT, ge=PAGE_SIZE_MIN, le=PAGE_SIZE_MAX)
    progressive_loading: bool = PROGRESSIVE_LOADING_DEFAULT

    # Refresh
    debounce_ms: int = Field(default=DEBOUNCE_MS_DEFAULT, ge=DEBOUNCE_MS_MIN)

    # Watch / reconnect
    watch_enabled: bool = WATCH_ENABLED_DEFAULT
    max_reconnect_attempts: int = Field(
        default=MAX_RECONNECT_ATTEMPTS_DEFAULT, ge=RECONNECT_ATTEMPTS_MIN
    )
    reconnect_base_delay_ms: int = Field(default=RECONNECT_BASE_DELAY_MS_DEFAULT, ge=0)
    watch_timeout_seconds: int | None = Field(default=None, ge=1)

    # Cluster
    context: str | None = None
    resource_kinds: list[str] = list(RESOURCE_KINDS_DEFAULT)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def reconnect_base_delay_seconds(self) -> float:
        return self.reconnect_base_delay_ms / 1000.0


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when settings fail to load."""


class ConfigSaveError(ConfigError):
    """Raised when settings fail to save."""
