"""
In-Memory Entry Store

Reference implementation of EntryStoreInterface. Keeps ledgers in a
dict and pushes a full snapshot to every subscriber after each change,
the way a document database with change listeners does.

TRADEOFFS:
- Nothing survives the process (fine for tests and demos)
- Fault injection hooks (set_available, fail_subscribers) let tests
  exercise the error paths of live views
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional, Union
from uuid import uuid4

import structlog

from household_ledger.models.entry import Entry, NewEntry, Snapshot
from household_ledger.services.storage.interface import (
    EntryStoreInterface,
    NotFoundError,
    SnapshotSubscription,
    StoreUnavailable,
)


# Queue marker: the store shut down, end iteration
_CLOSED = object()


@dataclass
class _LedgerRecord:
    owner_id: str
    entries: list[Entry] = field(default_factory=list)
    sequence: int = 0


class InMemorySubscription(SnapshotSubscription):
    """Subscription backed by an asyncio queue fed by the store."""

    def __init__(self, store: "InMemoryEntryStore", ledger_id: str):
        self._store = store
        self.ledger_id = ledger_id
        self._queue: asyncio.Queue[Union[Snapshot, StoreUnavailable, object]] = asyncio.Queue()
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def open(self) -> None:
        self._store._attach(self)
        self._active = True

    async def close(self) -> None:
        if self._active:
            self._active = False
            self._store._detach(self)

    def _push(self, item: Union[Snapshot, StoreUnavailable, object]) -> None:
        self._queue.put_nowait(item)

    async def __anext__(self) -> Snapshot:
        if not self._active:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, StoreUnavailable):
            raise item
        return item


class InMemoryEntryStore(EntryStoreInterface):
    """
    Process-local entry store.

    Every change bumps the ledger's sequence number and delivers a new
    snapshot to all of that ledger's subscribers. New subscribers get
    the current snapshot immediately.
    """

    def __init__(self):
        self._ledgers: dict[str, _LedgerRecord] = {}
        self._subscribers: dict[str, list[InMemorySubscription]] = defaultdict(list)
        self._available = True
        self._logger = structlog.get_logger(__name__)

    # -- ledgers -----------------------------------------------------------

    async def create_ledger(self, owner_id: str, ledger_id: Optional[str] = None) -> str:
        """Create an empty ledger and return its id."""
        self._check_available()
        ledger_id = ledger_id or str(uuid4())
        if ledger_id in self._ledgers:
            raise ValueError(f"Ledger already exists: {ledger_id}")
        self._ledgers[ledger_id] = _LedgerRecord(owner_id=owner_id)
        self._logger.info("ledger_created", ledger_id=ledger_id, owner_id=owner_id)
        return ledger_id

    async def ledger_exists(self, ledger_id: str) -> bool:
        self._check_available()
        return ledger_id in self._ledgers

    # -- entries -----------------------------------------------------------

    async def create_entry(self, ledger_id: str, entry: NewEntry) -> str:
        self._check_available()
        record = self._get_record(ledger_id)

        entry_id = uuid4().hex
        record.entries.append(Entry.from_new(entry_id, entry))
        record.sequence += 1

        self._logger.debug(
            "entry_created",
            ledger_id=ledger_id,
            entry_id=entry_id,
            sequence=record.sequence,
        )
        self._publish(ledger_id)
        return entry_id

    def snapshot(self, ledger_id: str) -> Snapshot:
        """The current full snapshot of a ledger."""
        record = self._get_record(ledger_id)
        return Snapshot(
            ledger_id=ledger_id,
            sequence=record.sequence,
            entries=tuple(record.entries),
        )

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, ledger_id: str) -> InMemorySubscription:
        return InMemorySubscription(self, ledger_id)

    def subscriber_count(self, ledger_id: str) -> int:
        return len(self._subscribers.get(ledger_id, []))

    def watched_ledgers(self) -> list[str]:
        """Ledgers with at least one open subscription."""
        return list(self._subscribers)

    def _attach(self, subscription: InMemorySubscription) -> None:
        self._check_available()
        ledger_id = subscription.ledger_id
        self._get_record(ledger_id)

        self._subscribers[ledger_id].append(subscription)
        subscription._push(self.snapshot(ledger_id))
        self._logger.debug(
            "subscriber_attached",
            ledger_id=ledger_id,
            subscribers=self.subscriber_count(ledger_id),
        )

    def _detach(self, subscription: InMemorySubscription) -> None:
        subscribers = self._subscribers.get(subscription.ledger_id, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscribers.pop(subscription.ledger_id, None)
        self._logger.debug(
            "subscriber_detached",
            ledger_id=subscription.ledger_id,
            subscribers=len(subscribers),
        )

    def _publish(self, ledger_id: str) -> None:
        snapshot = self.snapshot(ledger_id)
        for subscription in list(self._subscribers.get(ledger_id, [])):
            subscription._push(snapshot)

    # -- fault injection ---------------------------------------------------

    def set_available(self, available: bool) -> None:
        """While unavailable, every operation raises StoreUnavailable."""
        self._available = available

    def fail_subscribers(self, ledger_id: str, message: str = "Snapshot delivery failed") -> None:
        """Deliver an error to every current subscriber of a ledger."""
        self._logger.warning("delivery_failed", ledger_id=ledger_id, error=message)
        for subscription in list(self._subscribers.get(ledger_id, [])):
            subscription._push(StoreUnavailable(message))

    async def close(self) -> None:
        """End every open subscription."""
        for subscriptions in self._subscribers.values():
            for subscription in list(subscriptions):
                subscription._push(_CLOSED)

    # -- helpers -----------------------------------------------------------

    def _check_available(self) -> None:
        if not self._available:
            raise StoreUnavailable("Entry store is not reachable")

    def _get_record(self, ledger_id: str) -> _LedgerRecord:
        try:
            return self._ledgers[ledger_id]
        except KeyError:
            raise NotFoundError(f"Ledger not found: {ledger_id}")
