"""Resource tree provider - resource kinds at the root, objects underneath."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from kubetree.constants.enums import FetchState
from kubetree.constants.values import TAG_CATEGORY
from kubetree.controllers.watch import WatchPaths, WatchTransport
from kubetree.models.state import TreeSettings
from kubetree.models.tree import TreeNode
from kubetree.providers.base_provider import BaseTreeProvider
from kubetree.providers.nodes import category_node, resource_node

logger = logging.getLogger(__name__)


class ResourceClient(Protocol):
    """Supplies raw object lists for a resource kind."""

    async def list_resources(
        self,
        kind: str,
        namespace: str | None = None,
    ) -> list[dict[str, Any]]: ...


@dataclass
class FetchStatus:
    """Status tracking for a single resource kind fetch."""

    source_name: str
    state: FetchState = FetchState.SUCCESS
    error_message: str | None = None
    last_updated: datetime | None = None
    item_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_name": self.source_name,
            "state": self.state.value,
            "error_message": self.error_message,
            "last_updated": self.last_updated.isoformat()
            if self.last_updated
            else None,
            "item_count": self.item_count,
        }

    def summary(self) -> str:
        """Short status shown next to the kind in the tree."""
        if self.state is FetchState.LOADING:
            return "loading"
        if self.state is FetchState.ERROR:
            return "failed"
        noun = "item" if self.item_count == 1 else "items"
        return f"{self.item_count} {noun}"


class ResourceTreeProvider(BaseTreeProvider[TreeNode]):
    """Two-level tree: one category node per kind, then the objects of that kind.

    Category nodes are structural and never filtered; objects are filtered
    and paginated per category.
    """

    def __init__(
        self,
        client: ResourceClient,
        settings: TreeSettings | None = None,
        *,
        namespace: str | None = None,
        kinds: Iterable[str] | None = None,
        watch_transport: WatchTransport | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        super().__init__(settings, debounce_ms=debounce_ms, watch_transport=watch_transport)
        self._client = client
        self.namespace = namespace
        self.kinds: list[str] = list(kinds if kinds is not None else self.settings.resource_kinds)
        self._fetch_states: dict[str, FetchStatus] = {}

        if self.settings.progressive_loading:
            self.enable_progressive_loading(self.settings.page_size)

    def should_filter(self, parent: TreeNode | None) -> bool:
        return parent is not None and parent.tag == TAG_CATEGORY

    async def fetch_children(self, parent: TreeNode | None) -> Sequence[TreeNode]:
        if parent is None:
            return [self._category(kind) for kind in self.kinds]
        if parent.tag != TAG_CATEGORY:
            return []

        kind = str(parent.payload)
        status = self._fetch_states.setdefault(kind, FetchStatus(source_name=kind))
        status.state = FetchState.LOADING
        try:
            objects = await self._client.list_resources(kind, self.namespace)
        except Exception as exc:
            status.state = FetchState.ERROR
            status.error_message = str(exc)
            status.last_updated = datetime.now(timezone.utc)
            raise

        nodes = [resource_node(obj, kind) for obj in objects]
        nodes.sort(key=lambda node: (node.description or "", node.label))

        status.state = FetchState.SUCCESS
        status.error_message = None
        status.last_updated = datetime.now(timezone.utc)
        status.item_count = len(nodes)
        return nodes

    def get_fetch_status(self, kind: str) -> FetchStatus | None:
        return self._fetch_states.get(kind)

    def _category(self, kind: str) -> TreeNode:
        status = self.get_fetch_status(kind)
        return category_node(kind, status.summary() if status is not None else None)

    # =========================================================================
    # Watches
    # =========================================================================

    def enable_watch(self) -> None:
        """Start one change-feed subscription per watchable kind.

        Kinds that already have a running subscription are left alone, so
        calling this again only restarts watches that gave up.
        """
        watched = {watch.label for watch in self._watches if watch.is_watching()}
        supported = set(WatchPaths.supported_kinds())
        for kind in self.kinds:
            if kind in watched:
                continue
            if kind not in supported:
                logger.warning("No watch path for %s, skipping", kind)
                continue
            self.start_watch(WatchPaths.for_kind(kind, self.namespace), name=kind)

        if not self.watch_enabled:
            logger.warning("No resource watch could be started")
            return
        logger.info("Resource watch enabled for %s kind(s)", len(self._watches))

    def disable_watch(self) -> None:
        self.stop_all_watches()
        logger.info("Resource watch disabled")
