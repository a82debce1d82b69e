"""Scalar constants.

Application strings, node tags and identifiers.
"""

from typing import Final

# ============================================================================
# Application
# ============================================================================

APP_TITLE: Final = "KubeTree"

# ============================================================================
# Tree identifiers
# ============================================================================

ROOT_PARENT_KEY: Final = "root"
LOAD_MORE_ID_PREFIX: Final = "load-more-"

# ============================================================================
# Node tags
# ============================================================================

TAG_LOAD_MORE: Final = "loadMore"
TAG_ERROR: Final = "error"
TAG_LOADING: Final = "loading"
TAG_CATEGORY: Final = "category"
TAG_RESOURCE: Final = "resource"
TAG_NAMESPACE: Final = "namespace"

# ============================================================================
# Labels
# ============================================================================

LOADING_LABEL_DEFAULT: Final = "Loading..."
ERROR_LABEL_PREFIX: Final = "Error: "

__all__ = [
    "APP_TITLE",
    "ERROR_LABEL_PREFIX",
    "LOADING_LABEL_DEFAULT",
    "LOAD_MORE_ID_PREFIX",
    "ROOT_PARENT_KEY",
    "TAG_CATEGORY",
    "TAG_ERROR",
    "TAG_LOADING",
    "TAG_LOAD_MORE",
    "TAG_NAMESPACE",
    "TAG_RESOURCE",
]
