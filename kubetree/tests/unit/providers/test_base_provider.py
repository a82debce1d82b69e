"""Unit tests for BaseTreeProvider.

Tests cover:
- Progressive loading (page arithmetic, sentinel, per-parent counters)
- Filtering (case-insensitive matching, cache, filter-before-pagination)
- Debounced versus immediate refresh
- get_children error handling and sentinel parents
- Host view wiring and disposal
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from unittest.mock import MagicMock

import pytest

from kubetree.constants.values import TAG_LOAD_MORE
from kubetree.models.state import TreeSettings
from kubetree.models.tree import LoadMorePayload, TreeNode, load_more_node
from kubetree.providers.base_provider import BaseTreeProvider
from kubetree.utils.events import Disposable, EventEmitter


def make_items(count: int, prefix: str = "item") -> list[TreeNode]:
    return [TreeNode(id=f"{prefix}-{i:03d}", label=f"{prefix}-{i:03d}") for i in range(count)]


class StaticProvider(BaseTreeProvider[TreeNode]):
    """Provider serving a fixed list at the root."""

    def __init__(self, items: list[TreeNode] | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.items = items or []
        self.fetch_calls = 0
        self.fail_with: Exception | None = None

    async def fetch_children(self, parent: TreeNode | None) -> Sequence[TreeNode]:
        self.fetch_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if parent is None:
            return self.items
        return []


class FakeHostView:
    def __init__(self) -> None:
        self.expanded: EventEmitter[TreeNode] = EventEmitter("expanded")
        self.collapsed: EventEmitter[TreeNode] = EventEmitter("collapsed")
        self.visibility: EventEmitter[bool] = EventEmitter("visibility")

    def on_did_expand_node(self, listener: Callable[[TreeNode], None]) -> Disposable:
        return self.expanded.subscribe(listener)

    def on_did_collapse_node(self, listener: Callable[[TreeNode], None]) -> Disposable:
        return self.collapsed.subscribe(listener)

    def on_did_change_visibility(self, listener: Callable[[bool], None]) -> Disposable:
        return self.visibility.subscribe(listener)


def real_items(result: list[TreeNode]) -> list[TreeNode]:
    return [node for node in result if not node.is_load_more]


def sentinels(result: list[TreeNode]) -> list[TreeNode]:
    return [node for node in result if node.is_load_more]


# =============================================================================
# Progressive loading
# =============================================================================


class TestProgressiveLoading:
    """Tests for page arithmetic and the reveal-more sentinel."""

    @pytest.fixture
    def provider(self) -> StaticProvider:
        provider = StaticProvider(debounce_ms=0)
        provider.enable_progressive_loading(50)
        return provider

    def test_disabled_returns_items_unchanged(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        items = make_items(150)
        assert provider.apply_progressive_loading(items) == items

    def test_first_page_has_sentinel_with_remaining_count(self, provider: StaticProvider) -> None:
        result = provider.apply_progressive_loading(make_items(150), "root")

        assert len(real_items(result)) == 50
        [sentinel] = sentinels(result)
        assert result[-1] is sentinel
        assert sentinel.tag == TAG_LOAD_MORE
        assert sentinel.id == "load-more-root"
        assert sentinel.label == "Load More... (100 remaining)"
        assert sentinel.payload == LoadMorePayload(parent_key="root", remaining=100)

    def test_load_more_reveals_pages_until_exhausted(self, provider: StaticProvider) -> None:
        items = make_items(150)

        provider.load_more("root")
        result = provider.apply_progressive_loading(items, "root")
        assert len(real_items(result)) == 100
        assert sentinels(result)[0].payload.remaining == 50

        provider.load_more("root")
        result = provider.apply_progressive_loading(items, "root")
        assert result == items
        assert sentinels(result) == []

    def test_page_arithmetic_for_many_shapes(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        for page_size in (1, 7, 50):
            for total in (0, 1, page_size - 1, page_size, page_size + 1, 3 * page_size + 2):
                for pages in (1, 2, 5):
                    provider.enable_progressive_loading(page_size)
                    provider.loaded_pages["k"] = pages
                    items = make_items(max(total, 0))

                    result = provider.apply_progressive_loading(items, "k")

                    shown = min(pages * page_size, len(items))
                    assert real_items(result) == items[:shown]
                    if pages * page_size < len(items):
                        assert len(sentinels(result)) == 1
                        assert sentinels(result)[0].payload.remaining == len(items) - pages * page_size
                    else:
                        assert sentinels(result) == []

    def test_page_counters_are_independent_per_parent(self, provider: StaticProvider) -> None:
        items = make_items(150)

        provider.load_more("a")

        assert provider.pages_revealed("a") == 2
        assert provider.pages_revealed("b") == 1
        assert len(real_items(provider.apply_progressive_loading(items, "b"))) == 50

    def test_reset_progressive_loading_returns_to_first_page(self, provider: StaticProvider) -> None:
        provider.load_more("root")
        provider.load_more("root")

        provider.reset_progressive_loading("root")

        assert provider.pages_revealed("root") == 1

    def test_enable_resets_all_counters(self, provider: StaticProvider) -> None:
        provider.load_more("a")
        provider.enable_progressive_loading(10)

        assert provider.loaded_pages == {}
        assert provider.progressive_config.page_size == 10

    def test_disable_clears_counters(self, provider: StaticProvider) -> None:
        provider.load_more("a")
        provider.disable_progressive_loading()

        assert provider.progressive_config.enabled is False
        assert provider.loaded_pages == {}

    def test_load_more_counts_operations(self, provider: StaticProvider) -> None:
        provider.load_more()
        provider.load_more()
        assert provider.get_telemetry()["progressive_load_operations"] == 2

    def test_settings_page_size_is_not_applied_by_base(self) -> None:
        provider = StaticProvider(settings=TreeSettings(page_size=10), debounce_ms=0)
        assert provider.progressive_config.enabled is False


# =============================================================================
# Filtering
# =============================================================================


class TestFiltering:
    """Tests for case-insensitive filtering and the filter cache."""

    @pytest.fixture
    def provider(self) -> StaticProvider:
        return StaticProvider(debounce_ms=0)

    def test_empty_filter_matches_everything(self, provider: StaticProvider) -> None:
        items = make_items(5)
        assert provider.apply_filter(items) == items

    def test_filter_is_case_insensitive(self, provider: StaticProvider) -> None:
        node = TreeNode(id="x", label="MyPod")

        provider.set_filter("MYPOD")

        assert provider.get_filter() == "mypod"
        assert provider.matches_filter(node) is True

    def test_filter_is_case_folded(self, provider: StaticProvider) -> None:
        provider.set_filter("STRASSE")

        assert provider.get_filter() == "strasse"
        assert provider.matches_filter(TreeNode(id="x", label="Straße-config"))

    def test_filter_checks_description_and_tooltip(self, provider: StaticProvider) -> None:
        provider.set_filter("kube-system")

        assert provider.matches_filter(TreeNode(id="a", label="x", description="kube-system"))
        assert provider.matches_filter(TreeNode(id="b", label="x", tooltip="Namespace: kube-system"))
        assert not provider.matches_filter(TreeNode(id="c", label="x", description="default"))

    def test_filter_result_is_subset_preserving_order(self, provider: StaticProvider) -> None:
        items = make_items(10, "alpha") + make_items(10, "beta")
        provider.set_filter("beta")

        result = provider.apply_filter(items)

        assert result == items[10:]

    def test_filter_cache_hit_on_same_length(self, provider: StaticProvider) -> None:
        items = make_items(20)
        provider.set_filter("item-01")

        first = provider.apply_filter(items)
        second = provider.apply_filter(list(items))

        assert first is second
        assert provider.telemetry.cache_hits == 1
        assert provider.telemetry.cache_misses == 1
        assert provider.get_telemetry()["cache_hit_rate"] == "50.00%"

    def test_set_filter_invalidates_cache(self, provider: StaticProvider) -> None:
        items = make_items(20)
        provider.set_filter("item-01")
        provider.apply_filter(items)

        provider.set_filter("item-00")

        assert provider.filtered_cache == {}
        assert len(provider.apply_filter(items)) == 10

    def test_clear_filter(self, provider: StaticProvider) -> None:
        provider.set_filter("abc")
        provider.clear_filter()
        assert provider.get_filter() == ""

    def test_filter_applied_before_pagination(self, provider: StaticProvider) -> None:
        items = make_items(75, "match") + make_items(75, "other")
        provider.enable_progressive_loading(50)
        provider.set_filter("match")

        result = provider.apply_progressive_loading(provider.apply_filter(items), "root")

        assert len(result) == 51
        assert all(node.label.startswith("match") for node in real_items(result))
        assert sentinels(result)[0].payload.remaining == 25

    def test_set_filter_counts_operations(self, provider: StaticProvider) -> None:
        provider.set_filter("a")
        provider.set_filter("b")
        assert provider.get_telemetry()["filter_operations"] == 2


# =============================================================================
# Refresh
# =============================================================================


class TestRefresh:
    """Tests for debounced and immediate change notifications."""

    @pytest.mark.asyncio
    async def test_burst_of_refreshes_fires_once(self) -> None:
        provider = StaticProvider(debounce_ms=50)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        for _ in range(10):
            provider.refresh()
        assert listener.call_count == 0

        await asyncio.sleep(0.15)

        listener.assert_called_once_with(None)
        assert provider.telemetry.total_refreshes == 10

    @pytest.mark.asyncio
    async def test_separate_bursts_fire_separately(self) -> None:
        provider = StaticProvider(debounce_ms=30)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        provider.refresh()
        await asyncio.sleep(0.1)
        provider.refresh()
        await asyncio.sleep(0.1)

        assert listener.call_count == 2

    @pytest.mark.asyncio
    async def test_flush_refresh_delivers_pending_refresh_once(self) -> None:
        provider = StaticProvider(debounce_ms=50)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        provider.set_filter("item")
        provider.flush_refresh()
        listener.assert_called_once_with(None)

        await asyncio.sleep(0.1)
        provider.flush_refresh()

        listener.assert_called_once_with(None)

    @pytest.mark.asyncio
    async def test_load_more_notifies_without_waiting(self) -> None:
        provider = StaticProvider(debounce_ms=10_000)
        provider.enable_progressive_loading(50)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        provider.load_more()

        listener.assert_called_once_with(None)

    @pytest.mark.asyncio
    async def test_set_filter_is_debounced(self) -> None:
        provider = StaticProvider(debounce_ms=10_000)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        provider.set_filter("abc")

        assert listener.call_count == 0
        provider.dispose()

    def test_refresh_with_node_notifies_that_node(self) -> None:
        provider = StaticProvider(debounce_ms=10_000)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)
        node = TreeNode(id="n", label="n")

        provider.refresh(node)

        listener.assert_called_once_with(node)

    @pytest.mark.asyncio
    async def test_refresh_visible_is_debounced_full_refresh(self) -> None:
        provider = StaticProvider(debounce_ms=20)
        provider.visible_nodes.add("category-pods")
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        provider.refresh_visible()
        provider.refresh_visible()
        await asyncio.sleep(0.1)

        listener.assert_called_once_with(None)

    def test_refresh_after_dispose_is_noop(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)
        provider.dispose()

        provider.refresh()
        provider.refresh_immediate()

        listener.assert_not_called()


# =============================================================================
# get_children
# =============================================================================


class TestGetChildren:
    """Tests for the get_children pipeline."""

    @pytest.mark.asyncio
    async def test_filters_then_paginates(self) -> None:
        provider = StaticProvider(make_items(75, "match") + make_items(75, "other"), debounce_ms=0)
        provider.enable_progressive_loading(50)
        provider.set_filter("match")

        result = await provider.get_children()

        assert len(result) == 51
        assert result[-1].payload.remaining == 25

    @pytest.mark.asyncio
    async def test_fetch_error_becomes_error_node(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        provider.fail_with = RuntimeError("connection refused")

        result = await provider.get_children()

        assert len(result) == 1
        assert result[0].is_error
        assert result[0].id == "error-root"
        assert "connection refused" in result[0].label

    @pytest.mark.asyncio
    async def test_sentinel_parent_triggers_load_more(self) -> None:
        provider = StaticProvider(make_items(150), debounce_ms=0)
        provider.enable_progressive_loading(50)
        sentinel = load_more_node(100, "root")

        result = await provider.get_children(sentinel)

        assert result == []
        assert provider.pages_revealed("root") == 2
        assert provider.fetch_calls == 0

    @pytest.mark.asyncio
    async def test_loading_placeholder_at_root(self) -> None:
        provider = StaticProvider(make_items(3), debounce_ms=0)
        provider.set_loading(True, "Connecting to cluster...")

        result = await provider.get_children()

        assert [node.label for node in result] == ["Connecting to cluster..."]
        assert result[0].is_loading
        assert provider.fetch_calls == 0

        provider.set_loading(False)
        assert len(await provider.get_children()) == 3

    @pytest.mark.asyncio
    async def test_loading_without_message_fetches(self) -> None:
        provider = StaticProvider(make_items(3), debounce_ms=0)
        provider.set_loading(True)

        assert len(await provider.get_children()) == 3


# =============================================================================
# Host view and disposal
# =============================================================================


class TestHostViewAndDisposal:
    """Tests for host view wiring and dispose()."""

    def test_expand_and_collapse_track_visible_nodes(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        view = FakeHostView()
        provider.set_host_view(view)
        node = TreeNode(id="category-pods", label="Pods")

        view.expanded.fire(node)
        assert provider.is_node_visible(node)

        view.collapsed.fire(node)
        assert not provider.is_node_visible(node)

    def test_becoming_visible_refreshes(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        view = FakeHostView()
        provider.set_host_view(view)
        listener = MagicMock()
        provider.on_did_change_tree_data(listener)

        view.visibility.fire(False)
        listener.assert_not_called()

        view.visibility.fire(True)
        listener.assert_called_once_with(None)

    def test_dispose_is_idempotent_and_detaches_host(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        view = FakeHostView()
        provider.set_host_view(view)
        provider.load_more("a")
        provider.set_filter("x")

        provider.dispose()
        provider.dispose()

        assert provider.disposed
        assert view.expanded.listener_count == 0
        assert view.collapsed.listener_count == 0
        assert view.visibility.listener_count == 0
        assert provider.loaded_pages == {}
        assert provider.visible_nodes == set()

    def test_start_watch_without_transport_returns_none(self) -> None:
        provider = StaticProvider(debounce_ms=0)
        assert provider.start_watch("/api/v1/pods") is None
        assert provider.watches == []
