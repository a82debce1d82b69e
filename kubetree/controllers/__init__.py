"""Controllers module for KubeTree.

This module provides the data-source side of the tree: resource listing
through kubectl and change-feed watch subscriptions.
"""

from __future__ import annotations

# Base classes
from kubetree.controllers.base import BaseController

# Resource listing
from kubetree.controllers.resources import ResourceController

# Watch subscriptions
from kubetree.controllers.watch import (
    KubectlWatchTransport,
    WatchManager,
    WatchPaths,
)

__all__ = [
    "BaseController",
    "KubectlWatchTransport",
    "ResourceController",
    "WatchManager",
    "WatchPaths",
]
