from booking_calendar.config import StoreConfig
from booking_calendar.store.base import (
    DocumentNotFoundError,
    DocumentStore,
    FieldFilter,
    StoredDocument,
    StoreError,
)
from booking_calendar.store.memory import InMemoryDocumentStore


def create_store(config: StoreConfig) -> DocumentStore:
    """Build the document store for the configured backend."""
    if config.backend == "memory":
        return InMemoryDocumentStore()
    from booking_calendar.store.firestore import FirestoreDocumentStore

    return FirestoreDocumentStore(project=config.project_id, database=config.database)


__all__ = [
    "DocumentStore",
    "DocumentNotFoundError",
    "FieldFilter",
    "InMemoryDocumentStore",
    "StoredDocument",
    "StoreError",
    "create_store",
]
