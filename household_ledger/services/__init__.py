"""Services package."""

from household_ledger.services.storage import (
    EntryStoreInterface,
    InMemoryEntryStore,
    InMemorySubscription,
    NotFoundError,
    SnapshotSubscription,
    StorageError,
    StoreUnavailable,
)

__all__ = [
    "EntryStoreInterface",
    "InMemoryEntryStore",
    "InMemorySubscription",
    "NotFoundError",
    "SnapshotSubscription",
    "StorageError",
    "StoreUnavailable",
]
