"""
Storage Services Package

Provides the abstract entry store interface and an in-memory
implementation. Real backends live outside this package and plug in
by implementing EntryStoreInterface.
"""

from household_ledger.services.storage.interface import (
    EntryStoreInterface,
    NotFoundError,
    SnapshotSubscription,
    StorageError,
    StoreUnavailable,
)
from household_ledger.services.storage.memory import (
    InMemoryEntryStore,
    InMemorySubscription,
)

__all__ = [
    # Interfaces
    "EntryStoreInterface",
    "SnapshotSubscription",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreUnavailable",
    # In-memory implementation
    "InMemoryEntryStore",
    "InMemorySubscription",
]
