"""Abstract base class for document stores.

Defines the small set of document operations the booking services rely on:
point reads, merge/overwrite writes, partial updates, auto-id inserts,
filtered queries and live listeners. Any backend (Firestore, in-memory)
implements this ABC.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from booking_calendar.realtime.subscription import Subscription

FILTER_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class StoreError(Exception):
    """Raised when a store operation fails (network, permissions, backend)."""


class DocumentNotFoundError(StoreError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"No document '{doc_id}' in collection '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


@dataclass(frozen=True)
class FieldFilter:
    """A single ``field <op> value`` predicate. Filters in a query are ANDed."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(
                f"Unsupported filter operator {self.op!r}. "
                f"Valid operators: {list(FILTER_OPERATORS)}"
            )

    def matches(self, data: dict[str, Any]) -> bool:
        if self.field not in data:
            return False
        try:
            return FILTER_OPERATORS[self.op](data[self.field], self.value)
        except TypeError:
            return False


@dataclass
class StoredDocument:
    """A document read from the store: its id plus a copy of its fields."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[list[StoredDocument]], None]
ErrorCallback = Callable[[Exception], None]


class DocumentStore(ABC):
    """Abstract document store.

    Subclasses must implement reads, writes, queries and live listeners.
    Backend failures surface as :class:`StoreError`.
    """

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        """Fetch a single document, or None when it does not exist."""

    @abstractmethod
    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        """Create or overwrite a document.

        Args:
            collection: Collection name.
            doc_id: Document identifier.
            data: Fields to write.
            merge: When True, fields absent from ``data`` keep their stored
                values instead of being dropped.
        """

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Apply a partial update to an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

    @abstractmethod
    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a store-assigned id and return that id."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
    ) -> list[StoredDocument]:
        """Return every document matching all ``filters``.

        Results are sorted by ``order_by`` when given, otherwise by
        document id.
        """

    @abstractmethod
    def watch(
        self,
        collection: str,
        on_change: SnapshotCallback,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Register a live listener over a filtered collection.

        ``on_change`` receives the full current matching set once on
        registration and again after every change to a matching document.

        Returns:
            Subscription handle; invoke it to stop receiving updates.
        """
