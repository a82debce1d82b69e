"""Main application class for KubeTree."""

from __future__ import annotations

import logging
from contextlib import suppress
from pathlib import Path

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.timer import Timer
from textual.widgets import Footer, Header, Input

from kubetree.constants.defaults import SEARCH_DEBOUNCE_MS_DEFAULT
from kubetree.constants.values import APP_TITLE
from kubetree.controllers import KubectlWatchTransport, ResourceController
from kubetree.models.state import ConfigLoadError, ConfigManager, TreeSettings
from kubetree.providers import (
    BaseTreeProvider,
    NamespaceTreeProvider,
    ResourceTreeProvider,
    WatchErrorNotice,
)
from kubetree.widgets import ResourceTree

logger = logging.getLogger(__name__)

VIEW_RESOURCES = "resources"
VIEW_NAMESPACES = "namespaces"


class KubeTreeApp(App[None]):
    """Main TUI application for KubeTree."""

    TITLE = APP_TITLE
    CSS = """
    #filter-input {
        dock: top;
        margin: 0 1;
    }
    """
    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("w", "toggle_watch", "Watch"),
        Binding("escape", "clear_filter", "Clear filter"),
        Binding("q", "quit", "Quit"),
    ]
    _SEARCH_DEBOUNCE_SECONDS = SEARCH_DEBOUNCE_MS_DEFAULT / 1000.0

    settings: TreeSettings

    def __init__(
        self,
        provider: BaseTreeProvider | None = None,
        settings: TreeSettings | None = None,
        *,
        config_path: Path | None = None,
        namespace: str | None = None,
        view: str = VIEW_RESOURCES,
        check_connection: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config_path = config_path
        self.settings = settings if settings is not None else self._load_settings()
        self._controller: ResourceController | None = None
        self._check_connection_on_mount = check_connection and provider is None
        self.provider = provider or self._build_provider(view, namespace)
        self._search_debounce_timer: Timer | None = None

    def _load_settings(self) -> TreeSettings:
        """Load settings from persistent storage, falling back to defaults."""
        try:
            return ConfigManager.load(self.config_path)
        except ConfigLoadError:
            logger.exception("Failed to load settings, using defaults")
            return TreeSettings()

    def _build_provider(self, view: str, namespace: str | None) -> BaseTreeProvider:
        self._controller = ResourceController(context=self.settings.context)
        transport = KubectlWatchTransport(context=self.settings.context)
        if view == VIEW_NAMESPACES:
            return NamespaceTreeProvider(
                self._controller,
                self.settings,
                watch_transport=transport,
            )
        return ResourceTreeProvider(
            self._controller,
            self.settings,
            namespace=namespace,
            watch_transport=transport,
        )

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(placeholder="Filter resources...", id="filter-input")
        yield ResourceTree(self.provider, label=self.settings.context or "Cluster", id="resource-tree")
        yield Footer()

    def on_mount(self) -> None:
        self.provider.on_did_watch_error(self._on_watch_error)
        if self._check_connection_on_mount and self._controller is not None:
            self.provider.set_loading(True, "Connecting to cluster...")
            self.run_worker(self._check_connection(), group="connection-check", exclusive=True)
        if self.settings.watch_enabled:
            self._set_watch(True)
        with suppress(Exception):
            self.query_one(ResourceTree).focus()

    def on_unmount(self) -> None:
        if self._search_debounce_timer is not None:
            with suppress(Exception):
                self._search_debounce_timer.stop()
            self._search_debounce_timer = None
        self.provider.dispose()

    async def _check_connection(self) -> None:
        if self._controller is None:
            return
        connected = await self._controller.check_connection()
        self.provider.set_loading(False)
        if not connected:
            self.notify(
                "Cannot connect to Kubernetes cluster. Check your kubeconfig.",
                severity="error",
            )
        self.provider.refresh_immediate()

    # =========================================================================
    # Filter
    # =========================================================================

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "filter-input":
            return
        if self._search_debounce_timer is not None:
            self._search_debounce_timer.stop()
        value = event.value
        self._search_debounce_timer = self.set_timer(
            self._SEARCH_DEBOUNCE_SECONDS,
            lambda: self._apply_debounced_search(value),
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "filter-input":
            return
        if self._search_debounce_timer is not None:
            self._search_debounce_timer.stop()
            self._search_debounce_timer = None
        self.provider.set_filter(event.value)
        self.provider.flush_refresh()

    def _apply_debounced_search(self, value: str) -> None:
        self._search_debounce_timer = None
        self.provider.set_filter(value)

    # =========================================================================
    # Actions
    # =========================================================================

    def action_refresh(self) -> None:
        self.provider.refresh_immediate()

    def action_clear_filter(self) -> None:
        with suppress(Exception):
            self.query_one("#filter-input", Input).value = ""
        if self._search_debounce_timer is not None:
            self._search_debounce_timer.stop()
            self._search_debounce_timer = None
        self.provider.clear_filter()

    def action_toggle_watch(self) -> None:
        enabled = bool(getattr(self.provider, "watch_enabled", False))
        self._set_watch(not enabled)

    def _set_watch(self, enabled: bool) -> None:
        toggle = getattr(self.provider, "enable_watch" if enabled else "disable_watch", None)
        if not callable(toggle):
            self.notify("This view does not support live updates", severity="warning")
            return
        toggle()
        if enabled and not getattr(self.provider, "watch_enabled", False):
            self.notify("Live updates could not be started", severity="error")
            return
        self.notify("Live updates enabled" if enabled else "Live updates disabled")

    def _on_watch_error(self, notice: WatchErrorNotice) -> None:
        if notice.info.is_warning:
            severity = "warning"
        else:
            severity = "error"
        message = escape(notice.info.message)
        if notice.terminal:
            message = f"{message}\nLive updates stopped; press 'w' to retry."
        self.notify(message, severity=severity)
