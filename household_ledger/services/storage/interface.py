"""
Abstract Entry Store Interface

DESIGN DECISION: The persistent store and its live-update mechanism are
outside this package. We define the boundary as an abstract interface so
that:
1. Any backend with change notifications can feed the analytics
2. Tests and local runs use the in-memory store
3. Business logic stays decoupled from storage

The contract is deliberately small: subscribe to full snapshots, create
an entry, and check that a ledger exists. Snapshots are always full
replacements, never deltas.
"""

from abc import ABC, abstractmethod

from household_ledger.models.entry import NewEntry, Snapshot


class SnapshotSubscription(ABC):
    """
    One live subscription to a ledger's entries.

    Use it as an async context manager and iterate it:

        async with store.subscribe(ledger_id) as subscription:
            async for snapshot in subscription:
                ...

    Entering registers the subscription with the store; leaving always
    releases it, also on errors and cancellation. A delivery failure is
    raised from the iterator as StoreUnavailable.
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Register with the store.

        Raises:
            StoreUnavailable: If the subscription cannot be set up
            NotFoundError: If the ledger does not exist
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        pass

    @abstractmethod
    async def __anext__(self) -> Snapshot:
        """
        Wait for the next snapshot.

        Raises:
            StoreUnavailable: If delivery failed
            StopAsyncIteration: When the subscription has been released
        """
        pass

    def __aiter__(self) -> "SnapshotSubscription":
        return self

    async def __aenter__(self) -> "SnapshotSubscription":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        await self.close()
        return False


class EntryStoreInterface(ABC):
    """
    Abstract interface for the entry store.

    Any store implementation (document database, SQL with
    notifications, in-memory) must implement these methods.
    """

    @abstractmethod
    def subscribe(self, ledger_id: str) -> SnapshotSubscription:
        """
        Create a live subscription to a ledger.

        Nothing is registered until the subscription is entered.
        """
        pass

    @abstractmethod
    async def create_entry(self, ledger_id: str, entry: NewEntry) -> str:
        """
        Add an entry to a ledger.

        Args:
            ledger_id: Target ledger
            entry: A validated entry

        Returns:
            The store-assigned entry id

        Raises:
            NotFoundError: If the ledger does not exist
            StoreUnavailable: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def ledger_exists(self, ledger_id: str) -> bool:
        """
        Check whether a ledger exists.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Ledger not found in storage."""
    pass


class StoreUnavailable(StorageError):
    """Subscription setup or snapshot delivery failed. Retry by re-subscribing."""
    pass
