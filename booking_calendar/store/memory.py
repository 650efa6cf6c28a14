"""
In-process document store.

Implements the DocumentStore contract on plain dicts so the services can run
without a Firestore project: the offline console demo and the test suite
both use it. Listeners are notified synchronously on the writer's thread,
after the write has been applied.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from booking_calendar.realtime.subscription import Subscription
from booking_calendar.store.base import (
    DocumentNotFoundError,
    DocumentStore,
    ErrorCallback,
    FieldFilter,
    SnapshotCallback,
    StoredDocument,
)

logger = logging.getLogger(__name__)

AUTO_ID_LENGTH = 20


@dataclass
class _Watcher:
    watch_id: int
    collection: str
    filters: tuple[FieldFilter, ...]
    order_by: Optional[str]
    on_change: SnapshotCallback
    on_error: Optional[ErrorCallback]
    active: bool = True

    def matches(self, data: Optional[dict[str, Any]]) -> bool:
        if data is None:
            return False
        return all(f.matches(data) for f in self.filters)

    def dispatch(self, docs: list[StoredDocument]) -> None:
        if not self.active:
            return
        try:
            self.on_change(docs)
        except Exception as exc:
            logger.exception("Listener on '%s' raised while handling a snapshot", self.collection)
            if self.on_error is not None:
                self.on_error(exc)


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store with Firestore-like merge and listener semantics."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._watchers: dict[int, _Watcher] = {}
        self._watch_ids = itertools.count(1)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------ #

    def _run_query(
        self,
        collection: str,
        filters: Sequence[FieldFilter],
        order_by: Optional[str],
    ) -> list[StoredDocument]:
        docs = [
            StoredDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collections.get(collection, {}).items()
            if all(f.matches(data) for f in filters)
        ]
        if order_by is not None:
            docs = [d for d in docs if order_by in d.data]
            docs.sort(key=lambda d: (d.data[order_by], d.id))
        else:
            docs.sort(key=lambda d: d.id)
        return docs

    def _pending_deliveries(
        self,
        collection: str,
        before: Optional[dict[str, Any]],
        after: Optional[dict[str, Any]],
    ) -> list[tuple[_Watcher, list[StoredDocument]]]:
        deliveries = []
        for watcher in self._watchers.values():
            if watcher.collection != collection:
                continue
            if not (watcher.matches(before) or watcher.matches(after)):
                continue
            deliveries.append(
                (watcher, self._run_query(collection, watcher.filters, watcher.order_by))
            )
        return deliveries

    @staticmethod
    def _deliver(deliveries: list[tuple[_Watcher, list[StoredDocument]]]) -> None:
        for watcher, docs in deliveries:
            watcher.dispatch(docs)

    # ------------------------------------------------------------------ #
    # DocumentStore interface
    # ------------------------------------------------------------------ #

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return StoredDocument(id=doc_id, data=copy.deepcopy(data))

    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            before = docs.get(doc_id)
            if merge and before is not None:
                after = {**before, **copy.deepcopy(data)}
            else:
                after = copy.deepcopy(data)
            docs[doc_id] = after
            deliveries = self._pending_deliveries(collection, before, after)
        self._deliver(deliveries)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            before = docs.get(doc_id)
            if before is None:
                raise DocumentNotFoundError(collection, doc_id)
            after = {**before, **copy.deepcopy(data)}
            docs[doc_id] = after
            deliveries = self._pending_deliveries(collection, before, after)
        self._deliver(deliveries)

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:AUTO_ID_LENGTH]
        self.set(collection, doc_id, data)
        return doc_id

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
    ) -> list[StoredDocument]:
        with self._lock:
            return self._run_query(collection, filters, order_by)

    def watch(
        self,
        collection: str,
        on_change: SnapshotCallback,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        with self._lock:
            watcher = _Watcher(
                watch_id=next(self._watch_ids),
                collection=collection,
                filters=tuple(filters),
                order_by=order_by,
                on_change=on_change,
                on_error=on_error,
            )
            self._watchers[watcher.watch_id] = watcher
            initial = self._run_query(collection, watcher.filters, order_by)

        def _cancel() -> None:
            with self._lock:
                watcher.active = False
                self._watchers.pop(watcher.watch_id, None)

        logger.debug("Watcher %d registered on '%s'", watcher.watch_id, collection)
        self._deliver([(watcher, initial)])
        return Subscription(f"{collection}#{watcher.watch_id}", _cancel)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._watchers)
