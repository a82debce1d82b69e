"""Limit and threshold constants.

All limit values and validation ranges.
"""

from typing import Final

# ============================================================================
# Validation limits
# ============================================================================

PAGE_SIZE_MIN: Final = 1
PAGE_SIZE_MAX: Final = 5000
DEBOUNCE_MS_MIN: Final = 0
RECONNECT_ATTEMPTS_MIN: Final = 0

# ============================================================================
# Watch backoff limits
# ============================================================================

# Reconnect delay grows linearly with the attempt number up to this multiplier.
RECONNECT_DELAY_CAP_MULTIPLIER: Final = 5

__all__ = [
    "DEBOUNCE_MS_MIN",
    "PAGE_SIZE_MAX",
    "PAGE_SIZE_MIN",
    "RECONNECT_ATTEMPTS_MIN",
    "RECONNECT_DELAY_CAP_MULTIPLIER",
]
