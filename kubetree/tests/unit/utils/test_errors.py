"""Tests for error helpers and watch error classification."""

from __future__ import annotations

import socket

import pytest

from kubetree.constants.enums import WatchErrorCategory
from kubetree.utils.errors import (
    WatchError,
    classify_watch_error,
    get_error_message,
    get_status_code,
    is_auth_error,
    is_connection_error,
    is_timeout_error,
)


class TestGetErrorMessage:
    """Tests for get_error_message."""

    def test_exception_message(self) -> None:
        assert get_error_message(RuntimeError("boom")) == "boom"

    def test_exception_without_message_uses_type_name(self) -> None:
        assert get_error_message(ValueError()) == "ValueError"

    def test_plain_string(self) -> None:
        assert get_error_message("plain") == "plain"

    def test_status_dict(self) -> None:
        assert get_error_message({"code": 410, "message": "too old"}) == "HTTP 410: too old"
        assert get_error_message({"code": 500}) == "HTTP Error 500"
        assert get_error_message({"reason": "Expired"}) == "Expired"


class TestStatusCode:
    """Tests for get_status_code and is_auth_error."""

    def test_status_code_attribute(self) -> None:
        assert get_status_code(WatchError("x", status_code=403)) == 403

    def test_status_dict_code(self) -> None:
        assert get_status_code({"code": 410}) == 410

    def test_missing_status(self) -> None:
        assert get_status_code(RuntimeError("x")) is None

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_status_codes(self, status: int) -> None:
        assert is_auth_error(WatchError("denied", status_code=status))

    def test_status_code_takes_precedence_over_message(self) -> None:
        assert not is_auth_error(WatchError("forbidden words", status_code=500))

    def test_auth_from_message(self) -> None:
        assert is_auth_error(RuntimeError("Unauthorized"))


class TestErrorKinds:
    """Tests for timeout and connection predicates."""

    def test_timeout(self) -> None:
        assert is_timeout_error(TimeoutError())
        assert is_timeout_error(RuntimeError("context deadline exceeded"))
        assert not is_timeout_error(RuntimeError("not found"))

    def test_connection(self) -> None:
        assert is_connection_error(ConnectionRefusedError())
        assert is_connection_error(socket.gaierror("lookup failed"))
        assert is_connection_error(RuntimeError("Unable to connect to the server: dial tcp"))


class TestClassifyWatchError:
    """Tests for classify_watch_error."""

    def test_permission(self) -> None:
        info = classify_watch_error(WatchError("Forbidden", status_code=403), "/api/v1/pods")
        assert info.category is WatchErrorCategory.PERMISSION
        assert "/api/v1/pods" in info.message
        assert "Insufficient permissions" in info.message
        assert not info.is_warning

    def test_connection(self) -> None:
        info = classify_watch_error(ConnectionRefusedError("connection refused"))
        assert info.category is WatchErrorCategory.CONNECTION
        assert "Cannot connect" in info.message

    def test_timeout_is_warning(self) -> None:
        info = classify_watch_error(TimeoutError("timed out"), "/api/v1/pods")
        assert info.category is WatchErrorCategory.TIMEOUT
        assert info.is_warning
        assert "Will automatically reconnect." in info.message

    def test_generic_keeps_raw_message(self) -> None:
        info = classify_watch_error(RuntimeError("something odd"))
        assert info.category is WatchErrorCategory.GENERIC
        assert info.message == "Watch error: something odd"
