"""Error helpers for consistent message extraction and watch error classification."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Any

from kubetree.constants.enums import WatchErrorCategory

_AUTH_STATUS_CODES = frozenset({401, 403})
_AUTH_ERROR_TOKENS = ("unauthorized", "forbidden")
_CONNECTION_ERROR_TOKENS = (
    "connection refused",
    "name or service not known",
    "nodename nor servname",
    "no such host",
    "temporary failure in name resolution",
    "unable to connect to the server",
    "network is unreachable",
)
_TIMEOUT_ERROR_TOKENS = (
    "timed out",
    "timeout",
    "deadline exceeded",
    "i/o timeout",
    "context deadline exceeded",
)


class WatchError(RuntimeError):
    """Transport-level failure of a watch stream.

    Attributes:
        status_code: HTTP-equivalent status reported by the API server, if known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WatchStreamClosed(WatchError):
    """The server ended the watch stream without an error."""


def get_error_message(error: Any) -> str:
    """Extract a human-readable message from any error-like value."""
    if isinstance(error, BaseException):
        message = str(error)
        return message or type(error).__name__
    if isinstance(error, str):
        return error
    message = getattr(error, "message", None)
    if isinstance(message, str):
        return message
    if isinstance(error, dict):
        code = error.get("code")
        text = error.get("message") or error.get("reason") or ""
        if code and text:
            return f"HTTP {code}: {text}"
        if text:
            return str(text)
        if code:
            return f"HTTP Error {code}"
    return str(error)


def get_status_code(error: Any) -> int | None:
    """Return an HTTP-like status code attached to ``error``, if any."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    if isinstance(error, dict) and isinstance(error.get("code"), int):
        return error["code"]
    return None


def is_auth_error(error: Any) -> bool:
    """Return True for authentication/authorization failures (401/403)."""
    status = get_status_code(error)
    if status is not None:
        return status in _AUTH_STATUS_CODES
    message = get_error_message(error).lower()
    return any(token in message for token in _AUTH_ERROR_TOKENS)


def is_timeout_error(error: Any) -> bool:
    if isinstance(error, TimeoutError):
        return True
    message = get_error_message(error).lower()
    return any(token in message for token in _TIMEOUT_ERROR_TOKENS)


def is_connection_error(error: Any) -> bool:
    if isinstance(error, (ConnectionRefusedError, socket.gaierror)):
        return True
    message = get_error_message(error).lower()
    return any(token in message for token in _CONNECTION_ERROR_TOKENS)


@dataclass(frozen=True)
class WatchErrorInfo:
    """Categorized, user-facing description of a watch failure."""

    category: WatchErrorCategory
    message: str

    @property
    def is_warning(self) -> bool:
        """Timeouts recover on their own and are shown as warnings."""
        return self.category is WatchErrorCategory.TIMEOUT


def classify_watch_error(error: Any, path: str | None = None) -> WatchErrorInfo:
    """Map a raw transport error to a category and a message for the user."""
    raw_message = get_error_message(error) or "Unknown error"
    path_str = f" on {path}" if path else ""

    if is_auth_error(error):
        return WatchErrorInfo(
            WatchErrorCategory.PERMISSION,
            f"Watch failed{path_str}: Insufficient permissions. "
            "Check your kubeconfig and RBAC settings.",
        )
    if is_connection_error(error):
        return WatchErrorInfo(
            WatchErrorCategory.CONNECTION,
            f"Watch failed{path_str}: Cannot connect to Kubernetes cluster. "
            "Check your cluster connection.",
        )
    if is_timeout_error(error):
        return WatchErrorInfo(
            WatchErrorCategory.TIMEOUT,
            f"Watch connection timed out{path_str}. Will automatically reconnect.",
        )
    return WatchErrorInfo(
        WatchErrorCategory.GENERIC,
        f"Watch error{path_str}: {raw_message}",
    )


__all__ = [
    "WatchError",
    "WatchErrorInfo",
    "WatchStreamClosed",
    "classify_watch_error",
    "get_error_message",
    "get_status_code",
    "is_auth_error",
    "is_connection_error",
    "is_timeout_error",
]
