"""Base tree provider with debounced refresh, filtering, progressive loading and watches.

A provider decides which subset of a potentially huge collection the host
view shows for each parent node, and when the host should re-render:

- filtering is applied before pagination, so the "Load More" count always
  reflects the filtered set the user is looking at
- pagination is tracked per parent key, so branches page independently
- ``refresh()`` is debounced to collapse bursts of watch events, while
  ``load_more()`` refreshes immediately because it is a direct user action

All state is owned by the provider instance; providers never share state.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from kubetree.constants.defaults import PAGE_SIZE_DEFAULT
from kubetree.constants.values import ROOT_PARENT_KEY
from kubetree.controllers.watch import WatchManager, WatchTransport
from kubetree.models.state import TreeSettings
from kubetree.models.tree import (
    LoadMorePayload,
    TreeNode,
    error_node,
    load_more_node,
    loading_node,
)
from kubetree.models.watch import WatchEvent, WatchOptions
from kubetree.utils.debounce import Debouncer
from kubetree.utils.errors import WatchErrorInfo, classify_watch_error, get_error_message
from kubetree.utils.events import Disposable, EventEmitter

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", bound=TreeNode)


@dataclass
class ProgressiveLoadConfig:
    """Configuration for progressive loading."""

    enabled: bool = False
    page_size: int = PAGE_SIZE_DEFAULT
    show_load_more: bool = True


@dataclass
class ProviderTelemetry:
    """Counters describing how much work the provider is doing."""

    cache_hits: int = 0
    cache_misses: int = 0
    total_refreshes: int = 0
    filter_operations: int = 0
    progressive_load_operations: int = 0
    last_refresh_time: float = 0.0

    @property
    def cache_hit_rate(self) -> str:
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return "0%"
        return f"{self.cache_hits / lookups * 100:.2f}%"


@dataclass(frozen=True)
class WatchErrorNotice:
    """Watch failure surfaced to the host view."""

    path: str
    info: WatchErrorInfo
    terminal: bool = False


class HostView(Protocol):
    """Expand/collapse/visibility hooks supplied by the host UI."""

    def on_did_expand_node(self, listener: Callable[[TreeNode], None]) -> Disposable: ...

    def on_did_collapse_node(self, listener: Callable[[TreeNode], None]) -> Disposable: ...

    def on_did_change_visibility(self, listener: Callable[[bool], None]) -> Disposable: ...


class BaseTreeProvider(ABC, Generic[NodeT]):
    """Base tree data provider.

    Subclasses implement :meth:`fetch_children`; :meth:`get_children` wraps
    it with error handling, filtering and progressive loading.
    """

    filter_children: bool = True

    def __init__(
        self,
        settings: TreeSettings | None = None,
        *,
        debounce_ms: int | None = None,
        watch_transport: WatchTransport | None = None,
    ) -> None:
        self.settings = settings or TreeSettings()
        final_debounce = debounce_ms if debounce_ms is not None else self.settings.debounce_ms

        self._change_emitter: EventEmitter[TreeNode | None] = EventEmitter("tree-data-changed")
        self._watch_error_emitter: EventEmitter[WatchErrorNotice] = EventEmitter("watch-error")
        self._debounced_refresh = Debouncer(self.fire_refresh, final_debounce / 1000.0)
        self._watch_transport = watch_transport
        self._watches: list[WatchManager] = []
        self._disposables: list[Disposable] = []
        self._host_view: HostView | None = None
        self._disposed = False

        # Progressive loading
        self.progressive_config = ProgressiveLoadConfig()
        self.loaded_pages: dict[str, int] = {}

        # Search/filter
        self.filter_text = ""
        self.filtered_cache: dict[tuple[str, str, int], list[NodeT]] = {}

        # Expanded nodes reported by the host view
        self.visible_nodes: set[str] = set()

        # Loading state
        self.is_loading = False
        self.loading_node: TreeNode | None = None

        self.telemetry = ProviderTelemetry()

        logger.debug("%s initialized with %sms debounce", type(self).__name__, final_debounce)

    # =========================================================================
    # Host wiring
    # =========================================================================

    def on_did_change_tree_data(self, listener: Callable[[TreeNode | None], None]) -> Disposable:
        """Subscribe to change notifications (``None`` means everything changed)."""
        return self._change_emitter.subscribe(listener)

    def on_did_watch_error(self, listener: Callable[[WatchErrorNotice], None]) -> Disposable:
        """Subscribe to categorized watch failures."""
        return self._watch_error_emitter.subscribe(listener)

    def set_host_view(self, view: HostView) -> None:
        """Track the host's expanded nodes and refresh when it becomes visible."""
        self._host_view = view
        self._disposables.append(
            Disposable.from_many(
                [
                    view.on_did_change_visibility(self._on_visibility_changed),
                    view.on_did_expand_node(self._on_node_expanded),
                    view.on_did_collapse_node(self._on_node_collapsed),
                ]
            )
        )

    def _on_visibility_changed(self, visible: bool) -> None:
        if visible:
            self.refresh()

    def _on_node_expanded(self, node: TreeNode) -> None:
        node_id = self.get_element_id(node)
        if node_id:
            self.visible_nodes.add(node_id)

    def _on_node_collapsed(self, node: TreeNode) -> None:
        node_id = self.get_element_id(node)
        if node_id:
            self.visible_nodes.discard(node_id)

    def get_element_id(self, node: TreeNode) -> str | None:
        """Identity used for visibility tracking (override if ids are composite)."""
        return node.id

    def is_node_visible(self, node: TreeNode) -> bool:
        node_id = self.get_element_id(node)
        return node_id in self.visible_nodes if node_id else False

    def get_telemetry(self) -> dict[str, Any]:
        return {
            "cache_hits": self.telemetry.cache_hits,
            "cache_misses": self.telemetry.cache_misses,
            "total_refreshes": self.telemetry.total_refreshes,
            "filter_operations": self.telemetry.filter_operations,
            "progressive_load_operations": self.telemetry.progressive_load_operations,
            "last_refresh_time": self.telemetry.last_refresh_time,
            "cache_hit_rate": self.telemetry.cache_hit_rate,
        }

    def set_loading(self, loading: bool, message: str | None = None) -> None:
        """Show a single loading placeholder at the root while ``loading``."""
        self.is_loading = loading
        if loading and message:
            self.loading_node = loading_node(message)
        else:
            self.loading_node = None

    # =========================================================================
    # Children
    # =========================================================================

    @abstractmethod
    async def fetch_children(self, parent: NodeT | None) -> Sequence[NodeT]:
        """Return the raw, unfiltered and unpaginated children of ``parent``."""
        ...

    def get_parent_key(self, parent: TreeNode | None) -> str:
        return parent.id if parent is not None else ROOT_PARENT_KEY

    def should_filter(self, parent: NodeT | None) -> bool:
        """Whether children of ``parent`` go through the active filter."""
        return self.filter_children

    async def get_children(self, parent: NodeT | None = None) -> list[TreeNode]:
        """Children of ``parent`` as the host should display them.

        Fetch failures become a single inline error node instead of an
        exception in the host's rendering path.
        """
        parent_key = self.get_parent_key(parent)

        if parent is not None and parent.is_load_more:
            payload = parent.payload
            self.load_more(payload.parent_key if isinstance(payload, LoadMorePayload) else parent_key)
            return []

        if parent is None and self.is_loading and self.loading_node is not None:
            return [self.loading_node]

        try:
            items: list[NodeT] = list(await self.fetch_children(parent))
        except Exception as exc:
            logger.exception("Failed to load children of %s", parent_key)
            return [self.create_error_node(get_error_message(exc), parent_key)]

        if self.should_filter(parent):
            items = self.apply_filter(items, parent_key)
        return self.apply_progressive_loading(items, parent_key)

    def create_error_node(self, message: str, parent_key: str) -> TreeNode:
        return error_node(message, parent_key)

    # =========================================================================
    # Progressive loading
    # =========================================================================

    def enable_progressive_loading(self, page_size: int = PAGE_SIZE_DEFAULT) -> None:
        """Turn pagination on and reset every parent back to its first page."""
        self.progressive_config = ProgressiveLoadConfig(
            enabled=True,
            page_size=page_size,
            show_load_more=True,
        )
        self.loaded_pages.clear()
        logger.info("Progressive loading enabled with page size: %s", page_size)

    def disable_progressive_loading(self) -> None:
        self.progressive_config.enabled = False
        self.loaded_pages.clear()
        logger.info("Progressive loading disabled")

    def pages_revealed(self, parent_key: str = ROOT_PARENT_KEY) -> int:
        return self.loaded_pages.get(parent_key, 1)

    def apply_progressive_loading(
        self,
        items: list[Any],
        parent_key: str = ROOT_PARENT_KEY,
    ) -> list[Any]:
        """Return the revealed pages of ``items`` plus a "Load More" sentinel if some remain."""
        if not self.progressive_config.enabled:
            return items

        end_index = self.pages_revealed(parent_key) * self.progressive_config.page_size
        result = list(items[:end_index])

        if self.progressive_config.show_load_more and end_index < len(items):
            remaining = len(items) - end_index
            result.append(self.create_load_more_node(remaining, parent_key))

        return result

    def create_load_more_node(self, remaining: int, parent_key: str) -> TreeNode:
        return load_more_node(remaining, parent_key)

    def load_more(self, parent_key: str = ROOT_PARENT_KEY) -> None:
        """Reveal one more page under ``parent_key`` and refresh without delay."""
        current_page = self.pages_revealed(parent_key)
        self.loaded_pages[parent_key] = current_page + 1
        self.telemetry.progressive_load_operations += 1
        self.refresh_immediate()
        logger.info(
            "Loaded page %s for %r (total operations: %s)",
            current_page + 1,
            parent_key,
            self.telemetry.progressive_load_operations,
        )

    def reset_progressive_loading(self, parent_key: str = ROOT_PARENT_KEY) -> None:
        self.loaded_pages[parent_key] = 1

    # =========================================================================
    # Filtering
    # =========================================================================

    def set_filter(self, filter_text: str) -> None:
        """Set the case-insensitive filter and schedule a refresh."""
        self.filter_text = (filter_text or "").casefold()
        self.filtered_cache.clear()
        self.telemetry.filter_operations += 1
        self.refresh()
        logger.info(
            "Filter set to: %r (%s total filter operations)",
            filter_text,
            self.telemetry.filter_operations,
        )

    def clear_filter(self) -> None:
        self.set_filter("")

    def get_filter(self) -> str:
        return self.filter_text

    def matches_filter(self, node: TreeNode) -> bool:
        """Check label, description and tooltip, in that order."""
        if not self.filter_text:
            return True
        for value in (node.label, node.description, node.tooltip):
            if value and self.filter_text in str(value).casefold():
                return True
        return False

    def apply_filter(self, items: list[NodeT], parent_key: str = ROOT_PARENT_KEY) -> list[NodeT]:
        """Return the items matching the active filter.

        Results are cached per parent under ``(filter_text, len(items))``. The collection
        is not identity-stable between fetches, so the length acts as a cheap
        staleness check: a refetch with the same size but different content
        is served from the cache until the filter changes.
        """
        if not self.filter_text:
            return items

        cache_key = (parent_key, self.filter_text, len(items))
        cached = self.filtered_cache.get(cache_key)
        if cached is not None:
            self.telemetry.cache_hits += 1
            logger.debug("Filter cache hit: %s", cache_key)
            return cached

        self.telemetry.cache_misses += 1
        filtered = [item for item in items if self.matches_filter(item)]
        self.filtered_cache[cache_key] = filtered

        percentage = f"{len(filtered) / len(items) * 100:.1f}" if items else "0"
        logger.info(
            "Filter %r matched %s/%s items (%s%%)",
            self.filter_text,
            len(filtered),
            len(items),
            percentage,
        )
        return filtered

    # =========================================================================
    # Refresh
    # =========================================================================

    def fire_refresh(self) -> None:
        self._change_emitter.fire(None)

    def refresh(self, node: TreeNode | None = None) -> None:
        """Notify the host: ``node`` immediately, or everything after the debounce window."""
        if self._disposed:
            return
        self.telemetry.total_refreshes += 1
        self.telemetry.last_refresh_time = time.time()

        if node is not None:
            logger.debug(
                "Refreshing node %s (total refreshes: %s)",
                node.id,
                self.telemetry.total_refreshes,
            )
            self._change_emitter.fire(node)
        else:
            logger.debug(
                "Refreshing tree (debounced) (total refreshes: %s)",
                self.telemetry.total_refreshes,
            )
            self._debounced_refresh()

    def refresh_immediate(self, node: TreeNode | None = None) -> None:
        """Notify the host without going through the debounce window."""
        if self._disposed:
            return
        if node is not None:
            self._change_emitter.fire(node)
        else:
            self.fire_refresh()

    def flush_refresh(self) -> None:
        """Deliver a pending debounced refresh now, if one is scheduled."""
        if not self._disposed:
            self._debounced_refresh.flush()

    def refresh_visible(self) -> None:
        """Refresh after a change-feed event.

        Expanded-node tracking is only a hint for now: this always schedules
        a full (debounced) refresh and leaves it to the host to re-fetch just
        what it displays.
        """
        if self.visible_nodes:
            logger.debug("Context-aware refresh: %s visible nodes", len(self.visible_nodes))
        self.refresh()

    # =========================================================================
    # Watches
    # =========================================================================

    def default_watch_options(self) -> WatchOptions:
        return WatchOptions(
            timeout_seconds=self.settings.watch_timeout_seconds,
            max_reconnect_attempts=self.settings.max_reconnect_attempts,
            reconnect_base_delay=self.settings.reconnect_base_delay_seconds,
        )

    def start_watch(
        self,
        path: str,
        options: WatchOptions | None = None,
        name: str | None = None,
    ) -> WatchManager | None:
        """Start a change-feed subscription whose events refresh this provider.

        Returns the manager, or None when no transport is configured or the
        subscription could not be started.
        """
        if self._watch_transport is None:
            logger.error("Cannot watch %s: no watch transport configured", path)
            return None

        watch_options = options or self.default_watch_options()
        watch = WatchManager(self._watch_transport, name=name)
        try:
            watch.start(
                path,
                self.handle_watch_event,
                lambda error: self.handle_watch_error(error, path),
                watch_options,
                on_terminal=lambda error: self.handle_watch_terminal(error, path, watch),
            )
        except RuntimeError as exc:
            logger.error("Failed to start watch on %s: %s", path, exc)
            return None

        self._watches.append(watch)
        return watch

    @property
    def watches(self) -> list[WatchManager]:
        return list(self._watches)

    @property
    def watch_enabled(self) -> bool:
        """True while at least one subscription is still running or reconnecting."""
        return any(watch.is_watching() for watch in self._watches)

    def handle_watch_event(self, event: WatchEvent) -> None:
        """React to a change-feed event (override for custom behavior)."""
        logger.debug("Watch event: %s for %s/%s", event.type.value, event.kind, event.name)
        self.refresh_visible()

    def handle_watch_error(self, error: BaseException, path: str | None = None) -> None:
        info = classify_watch_error(error, path)
        if info.is_warning:
            logger.warning(info.message)
        else:
            logger.error(info.message)
        self._watch_error_emitter.fire(WatchErrorNotice(path=path or "", info=info))

    def handle_watch_terminal(
        self,
        error: BaseException,
        path: str | None = None,
        watch: WatchManager | None = None,
    ) -> None:
        info = classify_watch_error(error, path)
        if watch is not None and watch in self._watches:
            self._watches.remove(watch)
        logger.error("Watch on %s gave up: %s", path, info.message)
        self._watch_error_emitter.fire(WatchErrorNotice(path=path or "", info=info, terminal=True))

    def stop_all_watches(self) -> None:
        for watch in self._watches:
            try:
                watch.stop()
            except Exception:
                logger.exception("Error stopping watch on %s", watch.path)
        self._watches = []

    # =========================================================================
    # Disposal
    # =========================================================================

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Stop watches, release host wiring and drop all per-parent state."""
        if self._disposed:
            return
        self._disposed = True

        self.stop_all_watches()
        self._debounced_refresh.cancel()
        for disposable in self._disposables:
            disposable.dispose()
        self._disposables = []
        self._change_emitter.dispose()
        self._watch_error_emitter.dispose()
        self._host_view = None

        self.loaded_pages.clear()
        self.filtered_cache.clear()
        self.visible_nodes.clear()
        logger.debug("%s disposed", type(self).__name__)
