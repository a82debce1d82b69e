"""Change-feed watch subscriptions."""

from kubetree.controllers.watch.kubectl_transport import (
    KubectlWatchConnection,
    KubectlWatchTransport,
    error_from_kubectl_stderr,
)
from kubetree.controllers.watch.paths import WatchPaths
from kubetree.controllers.watch.watch_manager import (
    WatchCallback,
    WatchConnection,
    WatchErrorCallback,
    WatchManager,
    WatchTransport,
    reconnect_delay,
)

__all__ = [
    "KubectlWatchConnection",
    "KubectlWatchTransport",
    "WatchCallback",
    "WatchConnection",
    "WatchErrorCallback",
    "WatchManager",
    "WatchPaths",
    "WatchTransport",
    "error_from_kubectl_stderr",
    "reconnect_delay",
]
