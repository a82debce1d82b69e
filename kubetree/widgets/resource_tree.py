"""ResourceTree - Textual Tree bound to a tree provider.

The widget is the host view for a :class:`BaseTreeProvider`:

- children are fetched lazily through ``provider.get_children`` when a node
  is expanded, inside a Textual worker so the UI stays responsive
- provider change notifications rebuild the affected branch (or the whole
  tree), re-expanding nodes that were open before
- expand/collapse/show/hide are reported back to the provider through the
  ``HostView`` hooks
- selecting a "Load More" node reveals the next page
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from rich.text import Text
from textual.widgets import Tree
from textual.widgets.tree import TreeNode as TextualTreeNode

from kubetree.models.tree import LoadMorePayload, TreeNode
from kubetree.providers.base_provider import BaseTreeProvider
from kubetree.utils.events import Disposable, EventEmitter

logger = logging.getLogger(__name__)


class ResourceTree(Tree[TreeNode | None]):
    """Tree widget rendering the nodes served by a provider."""

    DEFAULT_CSS = """
    ResourceTree {
        height: 1fr;
    }
    """

    def __init__(
        self,
        provider: BaseTreeProvider,
        label: str = "Cluster",
        **kwargs,
    ) -> None:
        super().__init__(label, data=None, **kwargs)
        self.provider = provider
        self._expand_emitter: EventEmitter[TreeNode] = EventEmitter("node-expanded")
        self._collapse_emitter: EventEmitter[TreeNode] = EventEmitter("node-collapsed")
        self._visibility_emitter: EventEmitter[bool] = EventEmitter("visibility")
        self._subscriptions: list[Disposable] = []

    # =========================================================================
    # HostView hooks
    # =========================================================================

    def on_did_expand_node(self, listener: Callable[[TreeNode], None]) -> Disposable:
        return self._expand_emitter.subscribe(listener)

    def on_did_collapse_node(self, listener: Callable[[TreeNode], None]) -> Disposable:
        return self._collapse_emitter.subscribe(listener)

    def on_did_change_visibility(self, listener: Callable[[bool], None]) -> Disposable:
        return self._visibility_emitter.subscribe(listener)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def on_mount(self) -> None:
        self._subscriptions.append(
            self.provider.on_did_change_tree_data(self._on_provider_changed)
        )
        self.provider.set_host_view(self)
        self.root.expand()
        self.reload()

    def on_unmount(self) -> None:
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions = []
        self._expand_emitter.dispose()
        self._collapse_emitter.dispose()
        self._visibility_emitter.dispose()

    def on_show(self) -> None:
        self._visibility_emitter.fire(True)

    def on_hide(self) -> None:
        self._visibility_emitter.fire(False)

    # =========================================================================
    # Rendering
    # =========================================================================

    @staticmethod
    def render_label(node: TreeNode) -> Text:
        if node.is_error:
            return Text(node.label, style="bold red")
        if node.is_load_more:
            return Text(node.label, style="italic cyan")
        if node.is_loading:
            return Text(node.label, style="dim italic")
        label = Text(node.label)
        if node.description:
            label.append(f"  {node.description}", style="dim")
        return label

    def reload(self, target: TextualTreeNode[TreeNode | None] | None = None) -> None:
        """Re-fetch the children of ``target`` (the root by default)."""
        branch = target or self.root
        self.run_worker(
            self._populate(branch),
            group=f"tree-load-{branch.id}",
            exclusive=True,
        )

    async def _populate(self, branch: TextualTreeNode[TreeNode | None]) -> None:
        children = await self.provider.get_children(branch.data)
        expanded_ids = {
            child.data.id
            for child in branch.children
            if child.data is not None and child.is_expanded
        }

        branch.remove_children()
        for child in children:
            added = branch.add(
                self.render_label(child),
                data=child,
                allow_expand=child.expandable,
            )
            if child.expandable and child.id in expanded_ids:
                # Posts NodeExpanded, which loads the branch again.
                added.expand()

    def find_node(self, node_id: str) -> TextualTreeNode[TreeNode | None] | None:
        pending = list(self.root.children)
        while pending:
            candidate = pending.pop()
            if candidate.data is not None and candidate.data.id == node_id:
                return candidate
            pending.extend(candidate.children)
        return None

    def _on_provider_changed(self, node: TreeNode | None) -> None:
        if node is None:
            self.reload()
            return
        target = self.find_node(node.id)
        if target is None:
            logger.debug("Changed node %s is not displayed, reloading tree", node.id)
            self.reload()
        else:
            self.reload(target)

    # =========================================================================
    # Tree events
    # =========================================================================

    def on_tree_node_expanded(self, event: Tree.NodeExpanded[TreeNode | None]) -> None:
        data = event.node.data
        if data is None:
            return
        self._expand_emitter.fire(data)
        self.reload(event.node)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed[TreeNode | None]) -> None:
        data = event.node.data
        if data is not None:
            self._collapse_emitter.fire(data)

    def on_tree_node_selected(self, event: Tree.NodeSelected[TreeNode | None]) -> None:
        data = event.node.data
        if data is None or not data.is_load_more:
            return
        event.stop()
        payload = data.payload
        if isinstance(payload, LoadMorePayload):
            self.provider.load_more(payload.parent_key)
