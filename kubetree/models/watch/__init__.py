"""Watch models."""

from kubetree.models.watch.watch_event import WatchEvent, WatchOptions, WatchRequest

__all__ = [
    "WatchEvent",
    "WatchOptions",
    "WatchRequest",
]
