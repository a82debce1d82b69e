"""Watch manager - one long-lived change-feed subscription with auto-reconnect.

The manager is an explicit state machine::

    IDLE -> STARTING -> ACTIVE <-> RECONNECTING -> STOPPED

Transport failures are reported through ``on_error`` and then either
rescheduled with linear backoff or treated as terminal (attempt budget
exhausted, or a 401/403 from the API server). ``stop()`` can be called from
any state; after it returns no further callbacks fire.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any, Protocol

from kubetree.constants.enums import WatchEventType, WatchState
from kubetree.constants.limits import RECONNECT_DELAY_CAP_MULTIPLIER
from kubetree.models.watch import WatchEvent, WatchOptions, WatchRequest
from kubetree.utils.errors import (
    WatchStreamClosed,
    get_error_message,
    get_status_code,
    is_auth_error,
)

logger = logging.getLogger(__name__)

WatchCallback = Callable[[WatchEvent], None]
WatchErrorCallback = Callable[[BaseException], None]


class WatchConnection(Protocol):
    """An open change-feed stream yielding decoded ``{"type", "object"}`` frames."""

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]: ...

    def abort(self) -> None: ...


class WatchTransport(Protocol):
    """Opens change-feed streams for a :class:`WatchRequest`."""

    async def connect(self, request: WatchRequest) -> WatchConnection: ...


def reconnect_delay(
    attempt: int,
    base_delay: float,
    cap: int = RECONNECT_DELAY_CAP_MULTIPLIER,
) -> float:
    """Delay before reconnect ``attempt``: ``base_delay * min(attempt, cap)``."""
    return base_delay * min(max(attempt, 0), cap)


class WatchManager:
    """Manages a single watch subscription on top of a :class:`WatchTransport`."""

    def __init__(self, transport: WatchTransport, name: str | None = None) -> None:
        self._transport = transport
        self._name = name
        self._state = WatchState.IDLE
        self._path: str | None = None
        self._options = WatchOptions()
        self._on_event: WatchCallback | None = None
        self._on_error: WatchErrorCallback | None = None
        self._on_terminal: WatchErrorCallback | None = None
        self._reconnect_attempts = 0
        self._resource_version: str | None = None
        # Bumped on every start()/stop() so callbacks from an older run are dropped.
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._connection: WatchConnection | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def resource_version(self) -> str | None:
        """Last resource version seen, used as the resume marker on reconnect."""
        return self._resource_version

    @property
    def label(self) -> str:
        return self._name or self._path or "watch"

    def is_watching(self) -> bool:
        return self._state in (
            WatchState.STARTING,
            WatchState.ACTIVE,
            WatchState.RECONNECTING,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(
        self,
        path: str,
        on_event: WatchCallback,
        on_error: WatchErrorCallback | None = None,
        options: WatchOptions | None = None,
        on_terminal: WatchErrorCallback | None = None,
    ) -> None:
        """Open the subscription on the running event loop.

        Resets the reconnect budget. A subscription that is already running
        is stopped first.

        Raises:
            RuntimeError: If called without a running event loop.
        """
        if self.is_watching():
            logger.warning("Watch on %s already active, stopping previous watch", self._path)
            self.stop()

        loop = asyncio.get_running_loop()

        self._path = path
        self._options = options or WatchOptions()
        self._on_event = on_event
        self._on_error = on_error
        self._on_terminal = on_terminal
        self._reconnect_attempts = 0
        self._resource_version = self._options.resource_version
        self._generation += 1
        self._state = WatchState.STARTING

        generation = self._generation
        self._task = loop.create_task(self._run_attempt(generation))
        logger.info("Started watch on %s%s", path, self._options.describe_selectors())

    def stop(self) -> None:
        """Stop the subscription; safe to call repeatedly and from any state."""
        if self._state is WatchState.STOPPED and self._task is None:
            return

        self._generation += 1
        self._state = WatchState.STOPPED

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        connection, self._connection = self._connection, None
        if connection is not None:
            try:
                connection.abort()
            except Exception:
                logger.exception("Error aborting watch connection on %s", self._path)

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

        logger.debug("Watch stopped on %s", self._path)

    # =========================================================================
    # Stream handling
    # =========================================================================

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._state is not WatchState.STOPPED

    def _build_request(self) -> WatchRequest:
        return WatchRequest(
            path=self._path or "",
            label_selector=self._options.label_selector,
            field_selector=self._options.field_selector,
            resource_version=self._resource_version,
            timeout_seconds=self._options.timeout_seconds,
        )

    async def _run_attempt(self, generation: int) -> None:
        request = self._build_request()
        logger.debug("Starting watch on %s", request.url())

        try:
            connection = await self._transport.connect(request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._handle_failure(exc, generation)
            return

        if not self._is_current(generation):
            connection.abort()
            return

        self._connection = connection
        self._state = WatchState.ACTIVE

        try:
            async for raw in connection:
                if not self._is_current(generation):
                    break
                self._dispatch(raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._release_connection(connection)
            try:
                connection.abort()
            except Exception:
                logger.exception("Error aborting watch connection on %s", self._path)
            self._handle_failure(exc, generation)
            return

        self._release_connection(connection)
        if self._is_current(generation):
            self._handle_failure(
                WatchStreamClosed(f"Watch stream on {self._path} closed by server"),
                generation,
            )

    def _release_connection(self, connection: WatchConnection) -> None:
        if self._connection is connection:
            self._connection = None

    def _dispatch(self, raw: dict[str, Any]) -> None:
        try:
            event = WatchEvent.from_raw(raw)
        except ValueError:
            logger.warning("Ignoring watch frame with unknown type: %r", raw.get("type"))
            return

        try:
            self._track_resource_version(event)
        except Exception:
            logger.exception("Ignoring malformed watch frame on %s", self._path)
            return

        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            logger.exception("Watch event handler for %s raised", self._path)

    def _track_resource_version(self, event: WatchEvent) -> None:
        if event.type is WatchEventType.ERROR:
            # 410 Gone: the resume marker is too old, relist from scratch next time.
            if get_status_code(event.object) == 410:
                self._resource_version = None
        elif event.resource_version:
            self._resource_version = event.resource_version

    def _handle_failure(self, error: BaseException, generation: int) -> None:
        if not self._is_current(generation):
            return

        logger.error("Watch error on %s: %s", self._path, get_error_message(error))
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:
                logger.exception("Watch error handler for %s raised", self._path)

        # The error handler may have stopped us.
        if not self._is_current(generation):
            return

        if self._should_reconnect(error):
            self._schedule_reconnect(generation)
            return

        self._state = WatchState.STOPPED
        self._task = None
        self._connection = None
        logger.error("Watch on %s stopped permanently", self._path)
        if self._on_terminal is not None:
            try:
                self._on_terminal(error)
            except Exception:
                logger.exception("Watch terminal handler for %s raised", self._path)

    def _should_reconnect(self, error: BaseException) -> bool:
        if not self._options.auto_reconnect:
            return False

        if self._reconnect_attempts >= self._options.max_reconnect_attempts:
            logger.error(
                "Max reconnect attempts (%s) reached for %s",
                self._options.max_reconnect_attempts,
                self._path,
            )
            return False

        if is_auth_error(error):
            logger.error("Authentication/authorization error on %s, not reconnecting", self._path)
            return False

        return True

    def _schedule_reconnect(self, generation: int) -> None:
        self._reconnect_attempts += 1
        delay = reconnect_delay(self._reconnect_attempts, self._options.reconnect_base_delay)
        self._state = WatchState.RECONNECTING

        logger.info(
            "Scheduling reconnect attempt %s for %s in %.2fs",
            self._reconnect_attempts,
            self._path,
            delay,
        )
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(delay, self._reconnect, generation)

    def _reconnect(self, generation: int) -> None:
        self._reconnect_handle = None
        if not self._is_current(generation):
            return
        self._state = WatchState.STARTING
        self._task = asyncio.get_running_loop().create_task(self._run_attempt(generation))
