"""Utility helpers for KubeTree."""

from kubetree.utils.debounce import Debouncer
from kubetree.utils.errors import (
    WatchError,
    WatchErrorInfo,
    classify_watch_error,
    get_error_message,
)
from kubetree.utils.events import Disposable, EventEmitter

__all__ = [
    "Debouncer",
    "Disposable",
    "EventEmitter",
    "WatchError",
    "WatchErrorInfo",
    "classify_watch_error",
    "get_error_message",
]
