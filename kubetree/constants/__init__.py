"""Constants module for KubeTree.

Centralized constants organized by domain:
- enums.py: All Enum class definitions
- values.py: Scalar constants (strings, tags)
- timeouts.py: Timeout values (seconds)
- limits.py: Limit values (max/min)
- defaults.py: Default values for settings
"""

from kubetree.constants.defaults import (
    DEBOUNCE_MS_DEFAULT,
    MAX_RECONNECT_ATTEMPTS_DEFAULT,
    PAGE_SIZE_DEFAULT,
    RECONNECT_BASE_DELAY_MS_DEFAULT,
)
from kubetree.constants.enums import (
    FetchState,
    WatchErrorCategory,
    WatchEventType,
    WatchState,
)
from kubetree.constants.limits import (
    PAGE_SIZE_MIN,
    RECONNECT_DELAY_CAP_MULTIPLIER,
)
from kubetree.constants.timeouts import (
    CLUSTER_REQUEST_TIMEOUT,
    KUBECTL_COMMAND_TIMEOUT,
)
from kubetree.constants.values import (
    APP_TITLE,
    ROOT_PARENT_KEY,
    TAG_ERROR,
    TAG_LOAD_MORE,
    TAG_LOADING,
)

__all__ = [
    # Application
    "APP_TITLE",
    # Timeouts
    "CLUSTER_REQUEST_TIMEOUT",
    # Defaults
    "DEBOUNCE_MS_DEFAULT",
    "KUBECTL_COMMAND_TIMEOUT",
    "MAX_RECONNECT_ATTEMPTS_DEFAULT",
    "PAGE_SIZE_DEFAULT",
    # Limits
    "PAGE_SIZE_MIN",
    "RECONNECT_BASE_DELAY_MS_DEFAULT",
    "RECONNECT_DELAY_CAP_MULTIPLIER",
    # Tree
    "ROOT_PARENT_KEY",
    "TAG_ERROR",
    "TAG_LOADING",
    "TAG_LOAD_MORE",
    # Enums
    "FetchState",
    "WatchErrorCategory",
    "WatchEventType",
    "WatchState",
]
