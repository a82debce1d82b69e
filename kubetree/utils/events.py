"""Minimal event emitter and disposable handles.

Host views subscribe to provider notifications through :class:`EventEmitter`;
every subscription returns a :class:`Disposable` that detaches it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Disposable:
    """Wraps a release callback; disposing more than once is a no-op."""

    def __init__(self, on_dispose: Callable[[], None] | None = None) -> None:
        self._on_dispose = on_dispose
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._on_dispose is not None:
            self._on_dispose()
            self._on_dispose = None

    @classmethod
    def from_many(cls, disposables: Iterable[Disposable]) -> Disposable:
        items = list(disposables)

        def _dispose_all() -> None:
            for item in items:
                item.dispose()

        return cls(_dispose_all)


class EventEmitter(Generic[T]):
    """Fan-out of a single value to all subscribed listeners.

    A listener raising is logged and does not stop delivery to the others,
    since these notifications run on the UI path.
    """

    def __init__(self, name: str = "event") -> None:
        self._name = name
        self._listeners: list[Callable[[T], None]] = []
        self._disposed = False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[T], None]) -> Disposable:
        if self._disposed:
            return Disposable()
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    def fire(self, value: T) -> None:
        if self._disposed:
            return
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Listener for %s raised", self._name)

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()
