"""Google Cloud Firestore document store.

Builds a ``google.cloud.firestore.Client`` with Application Default
Credentials (ADC), so the same code runs locally (``gcloud auth
application-default login`` or ``GOOGLE_APPLICATION_CREDENTIALS``) and on
Cloud Run. Google API and credential errors, including retry deadlines,
are re-raised as :class:`StoreError`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import exceptions as gexc
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter as FirestoreFieldFilter

from booking_calendar.realtime.subscription import Subscription
from booking_calendar.store.base import (
    DocumentNotFoundError,
    DocumentStore,
    ErrorCallback,
    FieldFilter,
    SnapshotCallback,
    StoreError,
    StoredDocument,
)

logger = logging.getLogger(__name__)


@contextmanager
def _firestore_errors() -> Iterator[None]:
    try:
        yield
    except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as err:
        raise StoreError(f"Firestore error: {err}") from err


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore backed by Cloud Firestore."""

    def __init__(
        self,
        client: Optional[firestore.Client] = None,
        project: Optional[str] = None,
        database: Optional[str] = None,
    ) -> None:
        if client is None:
            # project ID inferred from ADC when not given
            with _firestore_errors():
                client = firestore.Client(project=project or None, database=database or None)
        self._client = client

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_query(
        self,
        collection: str,
        filters: Sequence[FieldFilter],
        order_by: Optional[str],
    ):
        query = self._client.collection(collection)
        for f in filters:
            query = query.where(filter=FirestoreFieldFilter(f.field, f.op, f.value))
        if order_by is not None:
            query = query.order_by(order_by)
        return query

    @staticmethod
    def _to_document(snapshot) -> StoredDocument:
        return StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {})

    # ------------------------------------------------------------------
    # DocumentStore interface
    # ------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        with _firestore_errors():
            snapshot = self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return self._to_document(snapshot)

    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        with _firestore_errors():
            self._client.collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        doc_ref = self._client.collection(collection).document(doc_id)
        try:
            with _firestore_errors():
                doc_ref.update(data)
        except StoreError as err:
            if isinstance(err.__cause__, gexc.NotFound):
                raise DocumentNotFoundError(collection, doc_id) from err.__cause__
            raise

    def add(self, collection: str, data: dict[str, Any]) -> str:
        with _firestore_errors():
            _, doc_ref = self._client.collection(collection).add(data)
        return doc_ref.id

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
    ) -> list[StoredDocument]:
        query = self._build_query(collection, filters, order_by)
        with _firestore_errors():
            return [self._to_document(snapshot) for snapshot in query.stream()]

    def watch(
        self,
        collection: str,
        on_change: SnapshotCallback,
        filters: Sequence[FieldFilter] = (),
        order_by: Optional[str] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        query = self._build_query(collection, filters, order_by)

        # Runs on the Firestore watch thread.
        def _on_snapshot(doc_snapshots, changes, read_time) -> None:
            docs = [self._to_document(snapshot) for snapshot in doc_snapshots]
            try:
                on_change(docs)
            except Exception as exc:
                logger.exception("Listener on '%s' raised while handling a snapshot", collection)
                if on_error is not None:
                    on_error(exc)

        with _firestore_errors():
            watch = query.on_snapshot(_on_snapshot)
        logger.debug("Firestore listener registered on '%s'", collection)
        return Subscription(f"{collection}@firestore", watch.unsubscribe)
