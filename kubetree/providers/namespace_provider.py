"""Namespace tree provider - a flat list of namespaces."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from kubetree.controllers.watch import WatchPaths, WatchTransport
from kubetree.models.state import TreeSettings
from kubetree.models.tree import TreeNode
from kubetree.providers.base_provider import BaseTreeProvider
from kubetree.providers.nodes import namespace_node
from kubetree.providers.resource_provider import ResourceClient

logger = logging.getLogger(__name__)


class NamespaceTreeProvider(BaseTreeProvider[TreeNode]):
    def __init__(
        self,
        client: ResourceClient,
        settings: TreeSettings | None = None,
        *,
        watch_transport: WatchTransport | None = None,
        debounce_ms: int | None = None,
    ) -> None:
        super().__init__(settings, debounce_ms=debounce_ms, watch_transport=watch_transport)
        self._client = client

        if self.settings.progressive_loading:
            self.enable_progressive_loading(self.settings.page_size)

    async def fetch_children(self, parent: TreeNode | None) -> Sequence[TreeNode]:
        if parent is not None:
            return []
        namespaces = await self._client.list_resources("namespaces")
        return sorted((namespace_node(obj) for obj in namespaces), key=lambda node: node.label)

    def enable_watch(self) -> None:
        """Enable real-time watch for namespace changes."""
        if self.watch_enabled:
            return
        self.stop_all_watches()
        if self.start_watch(WatchPaths.namespaces(), name="namespaces") is not None:
            logger.info("Namespace watch enabled")

    def disable_watch(self) -> None:
        self.stop_all_watches()
        logger.info("Namespace watch disabled")
