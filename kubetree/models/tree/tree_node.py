"""Tree node model shared by providers and host views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kubetree.constants.values import (
    ERROR_LABEL_PREFIX,
    LOAD_MORE_ID_PREFIX,
    LOADING_LABEL_DEFAULT,
    TAG_ERROR,
    TAG_LOAD_MORE,
    TAG_LOADING,
)


@dataclass
class TreeNode:
    """One displayable unit in the hierarchical resource view.

    ``id`` is the sole identity key: the same underlying resource must map to
    the same id across independent fetches.
    """

    id: str
    label: str
    description: str | None = None
    tooltip: str | None = None
    tag: str = ""
    payload: Any = None
    expandable: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_load_more(self) -> bool:
        return self.tag == TAG_LOAD_MORE

    @property
    def is_error(self) -> bool:
        return self.tag == TAG_ERROR

    @property
    def is_loading(self) -> bool:
        return self.tag == TAG_LOADING


@dataclass(frozen=True)
class LoadMorePayload:
    """Payload carried by a reveal-more sentinel."""

    parent_key: str
    remaining: int


def load_more_node(remaining: int, parent_key: str) -> TreeNode:
    """Create the sentinel node that reveals the next page of ``parent_key``."""
    return TreeNode(
        id=f"{LOAD_MORE_ID_PREFIX}{parent_key}",
        label=f"Load More... ({remaining} remaining)",
        tooltip=f"Show the next page of {remaining} hidden item(s)",
        tag=TAG_LOAD_MORE,
        payload=LoadMorePayload(parent_key=parent_key, remaining=remaining),
    )


def error_node(message: str, parent_key: str) -> TreeNode:
    """Create an inline error leaf shown in place of children that failed to load."""
    return TreeNode(
        id=f"error-{parent_key}",
        label=f"{ERROR_LABEL_PREFIX}{message}",
        tooltip=message,
        tag=TAG_ERROR,
    )


def loading_node(message: str = LOADING_LABEL_DEFAULT, parent_key: str = "root") -> TreeNode:
    return TreeNode(
        id=f"loading-{parent_key}",
        label=message,
        tag=TAG_LOADING,
    )
