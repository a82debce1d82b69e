"""Trailing-edge debounce built on the asyncio event loop timers.

Usage:
    from kubetree.utils.debounce import Debouncer

    notify = Debouncer(fire_refresh, wait_seconds=0.3)
    notify()      # schedules fire_refresh in 300ms
    notify()      # reschedules; fire_refresh still runs once
    notify.cancel()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Cancel-and-reschedule timer wrapping a single callback.

    Every call pushes the deadline ``wait_seconds`` into the future, so a
    burst of calls results in exactly one invocation once the burst has been
    quiet for a full window.
    """

    def __init__(self, callback: Callable[[], None], wait_seconds: float) -> None:
        self._callback = callback
        self._wait_seconds = max(0.0, float(wait_seconds))
        self._handle: asyncio.TimerHandle | None = None

    @property
    def wait_seconds(self) -> float:
        return self._wait_seconds

    @property
    def pending(self) -> bool:
        """Return True while an invocation is scheduled."""
        return self._handle is not None

    def __call__(self) -> None:
        self.cancel()
        if self._wait_seconds <= 0:
            self._callback()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop means no timers to coalesce against.
            logger.debug("No running event loop, invoking debounced callback immediately")
            self._callback()
            return
        self._handle = loop.call_later(self._wait_seconds, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self._callback()

    def cancel(self) -> None:
        """Drop the pending invocation, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run the pending invocation now instead of waiting for the window."""
        if self._handle is None:
            return
        self.cancel()
        self._callback()
