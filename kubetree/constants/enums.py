"""All enum definitions.

This module consolidates all enumerations used throughout the application.
"""

from enum import Enum

# =============================================================================
# Watch Enums
# =============================================================================

class WatchState(Enum):
    """Lifecycle states of a single watch subscription."""

    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    RECONNECTING = "reconnecting"
    STOPPED = "stopped"


class WatchEventType(Enum):
    """Change-feed event types emitted by the Kubernetes watch API."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class WatchErrorCategory(Enum):
    """User-facing categories for watch transport failures."""

    PERMISSION = "permission"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    GENERIC = "generic"


# =============================================================================
# Fetch State Enums
# =============================================================================

class FetchState(Enum):
    """Data fetch state values."""

    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


__all__ = [
    "FetchState",
    "WatchErrorCategory",
    "WatchEventType",
    "WatchState",
]
