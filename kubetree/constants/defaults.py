"""Default values for settings.

All default values used when no user configuration is available.
"""

from typing import Final

# ============================================================================
# Progressive loading defaults
# ============================================================================

PAGE_SIZE_DEFAULT: Final = 50
PROGRESSIVE_LOADING_DEFAULT: Final = True

# ============================================================================
# Refresh defaults
# ============================================================================

DEBOUNCE_MS_DEFAULT: Final = 300
SEARCH_DEBOUNCE_MS_DEFAULT: Final = 500

# ============================================================================
# Watch defaults
# ============================================================================

MAX_RECONNECT_ATTEMPTS_DEFAULT: Final = 5
RECONNECT_BASE_DELAY_MS_DEFAULT: Final = 1000
WATCH_ENABLED_DEFAULT: Final = False

# ============================================================================
# Resource tree defaults
# ============================================================================

RESOURCE_KINDS_DEFAULT: Final = (
    "pods",
    "deployments",
    "services",
    "configmaps",
    "secrets",
    "namespaces",
    "nodes",
)

__all__ = [
    "DEBOUNCE_MS_DEFAULT",
    "MAX_RECONNECT_ATTEMPTS_DEFAULT",
    "PAGE_SIZE_DEFAULT",
    "PROGRESSIVE_LOADING_DEFAULT",
    "RECONNECT_BASE_DELAY_MS_DEFAULT",
    "RESOURCE_KINDS_DEFAULT",
    "SEARCH_DEBOUNCE_MS_DEFAULT",
    "WATCH_ENABLED_DEFAULT",
]
