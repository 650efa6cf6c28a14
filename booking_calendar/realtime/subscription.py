"""Live listener handles and latest-snapshot views.

A store ``watch`` returns a :class:`Subscription`. Calling it (or its
``unsubscribe`` method) stops delivery and releases the listener; there is
no other cancellation mechanism. Delivery is at-least-once: a callback can
receive the same snapshot twice and must treat each call as the full
current set.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle for a live listener registered against the document store."""

    def __init__(self, name: str, cancel: Callable[[], None]) -> None:
        self._name = name
        self._cancel = cancel
        self._active = True
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._cancel()
        logger.info("Subscription '%s' closed", self._name)

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self._active else "closed"
        return f"<Subscription {self._name!r} {state}>"


class SnapshotView(Generic[T]):
    """
    Keeps the most recent snapshot delivered by a subscription.

    Pass the view itself as the subscription callback. The copy it holds is
    for display only; the store stays authoritative.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._items: list[T] = []
        self._update_count = 0
        self._listeners: list[Callable[[list[T]], None]] = []
        self._lock = threading.Lock()

    def __call__(self, items: list[T]) -> None:
        with self._lock:
            self._items = list(items)
            self._update_count += 1
            listeners = list(self._listeners)
        logger.debug("View '%s' refreshed with %d items", self._name, len(items))
        for listener in listeners:
            listener(list(items))

    @property
    def items(self) -> list[T]:
        with self._lock:
            return list(self._items)

    @property
    def update_count(self) -> int:
        return self._update_count

    def on_update(self, listener: Callable[[list[T]], None]) -> Callable[[], None]:
        """Register a listener for refreshes. Returns a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove
