"""Watch request/event models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from kubetree.constants.defaults import (
    MAX_RECONNECT_ATTEMPTS_DEFAULT,
    RECONNECT_BASE_DELAY_MS_DEFAULT,
)
from kubetree.constants.enums import WatchEventType


@dataclass(frozen=True)
class WatchEvent:
    """A single typed change-feed event."""

    type: WatchEventType
    object: dict[str, Any]

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> WatchEvent:
        """Build an event from a decoded ``{"type": ..., "object": ...}`` frame.

        Raises:
            ValueError: If the frame carries an unknown event type.
        """
        event_type = WatchEventType(str(raw.get("type", "")).upper())
        obj = raw.get("object")
        return cls(type=event_type, object=obj if isinstance(obj, dict) else {})

    @property
    def kind(self) -> str:
        return str(self.object.get("kind") or "")

    @property
    def metadata(self) -> dict[str, Any]:
        metadata = self.object.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    @property
    def name(self) -> str:
        return str(self.metadata.get("name") or "")

    @property
    def resource_version(self) -> str | None:
        value = self.metadata.get("resourceVersion")
        return str(value) if value else None


@dataclass(frozen=True)
class WatchRequest:
    """What to watch: an API path plus optional selectors and resume marker."""

    path: str
    label_selector: str | None = None
    field_selector: str | None = None
    resource_version: str | None = None
    timeout_seconds: int | None = None

    def query_params(self) -> dict[str, str]:
        params: dict[str, str] = {"watch": "true"}
        if self.resource_version:
            params["resourceVersion"] = self.resource_version
        if self.timeout_seconds:
            params["timeoutSeconds"] = str(self.timeout_seconds)
        if self.label_selector:
            params["labelSelector"] = self.label_selector
        if self.field_selector:
            params["fieldSelector"] = self.field_selector
        return params

    def url(self) -> str:
        """Return the watch URL (path plus encoded query string)."""
        separator = "&" if "?" in self.path else "?"
        return f"{self.path}{separator}{urlencode(self.query_params())}"


@dataclass
class WatchOptions:
    """Per-subscription watch options."""

    label_selector: str | None = None
    field_selector: str | None = None
    resource_version: str | None = None
    timeout_seconds: int | None = None
    auto_reconnect: bool = True
    max_reconnect_attempts: int = MAX_RECONNECT_ATTEMPTS_DEFAULT
    reconnect_base_delay: float = RECONNECT_BASE_DELAY_MS_DEFAULT / 1000.0

    def describe_selectors(self) -> str:
        """Human-readable selector summary used in log lines."""
        filters: list[str] = []
        if self.label_selector:
            filters.append(f"labels: {self.label_selector}")
        if self.field_selector:
            filters.append(f"fields: {self.field_selector}")
        return f" with {', '.join(filters)}" if filters else ""
