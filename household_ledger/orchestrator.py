"""
Main Orchestrator for Household Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Live view (subscribe → snapshot → summary + trend + history)
2. Entry recording (draft → validate → store → audit)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Derived views are always recomputed from one whole snapshot
- A snapshot older than the one on screen is never applied
- A store failure never wipes what the user already sees
- Every step is audited

This is the "glue" that ensures the system works correctly
even when the store behaves unexpectedly.
"""

import asyncio
from collections.abc import Callable
from typing import Optional
from uuid import UUID

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from household_ledger.analytics import query, summarize, trend, window_months
from household_ledger.audit import AuditLogger, create_correlation_id
from household_ledger.config import ExportSettings, StoreSettings, get_settings
from household_ledger.export import EmptyExportSet, build_export
from household_ledger.models import (
    Entry,
    EntryDraft,
    EntryFilter,
    ExportDocument,
    MonthlySummary,
    Snapshot,
    TrendPoint,
    ValidationResult,
    YearMonth,
)
from household_ledger.services.storage import (
    EntryStoreInterface,
    InMemoryEntryStore,
    NotFoundError,
    StorageError,
    StoreUnavailable,
)
from household_ledger.validation import EntryValidationError, EntryValidator


class LedgerView:
    """
    Live analytics over one ledger.

    Flow:
    1. Subscribe → the store delivers the current snapshot
    2. Apply → discard stale snapshots, replace the entry collection
    3. Recompute → summary, trend and history, once per snapshot
    4. On store errors → notify, keep the last views, re-subscribe

    Usage:
        async with LedgerView(store, ledger_id, notify=print) as view:
            ...
            view.summary, view.trend, view.history

    Leaving the context releases the subscription. A closed view
    ignores any snapshot that still arrives.
    """

    def __init__(
        self,
        store: EntryStoreInterface,
        ledger_id: str,
        *,
        month: Optional[YearMonth] = None,
        entry_filter: Optional[EntryFilter] = None,
        trend_window: Optional[int] = None,
        trend_anchor: Optional[YearMonth] = None,
        notify: Optional[Callable[[str], None]] = None,
        audit_logger: Optional[AuditLogger] = None,
        store_settings: Optional[StoreSettings] = None,
        export_settings: Optional[ExportSettings] = None,
    ):
        settings = get_settings()
        self._store = store
        self.ledger_id = ledger_id
        self._store_settings = store_settings or settings.store
        self._export_settings = export_settings or settings.export

        self._month = month or YearMonth.current()
        self._filter = entry_filter or EntryFilter()
        if trend_window is None:
            trend_window = settings.ledger.trend_window
        window_months(trend_window, self._month)
        self._trend_window = trend_window
        self._trend_anchor = trend_anchor

        self._notify = notify
        self._audit_logger = audit_logger or AuditLogger()
        self._correlation_id: UUID = create_correlation_id()

        self._entries: tuple[Entry, ...] = ()
        self._last_sequence = -1
        self._closed = False
        self._attempt = 0
        self._task: Optional[asyncio.Task] = None
        self._updated = asyncio.Event()

        self.last_error: Optional[str] = None
        self._summary: MonthlySummary
        self._trend: list[TrendPoint]
        self._history: list[Entry]
        self._recompute()

    # -- derived views -----------------------------------------------------

    @property
    def summary(self) -> MonthlySummary:
        return self._summary

    @property
    def trend(self) -> list[TrendPoint]:
        return self._trend

    @property
    def history(self) -> list[Entry]:
        return self._history

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def last_sequence(self) -> int:
        return self._last_sequence

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def month(self) -> YearMonth:
        return self._month

    @property
    def entry_filter(self) -> EntryFilter:
        return self._filter

    def _recompute(self) -> None:
        self._summary = summarize(self._entries, self._month)
        self._trend = trend(self._entries, self._trend_window, self._trend_anchor)
        self._history = query(self._entries, self._filter)

    # -- parameters --------------------------------------------------------

    def set_month(self, month: YearMonth) -> None:
        """Select the summary month."""
        self._month = month
        if not self._closed:
            self._recompute()

    def set_filter(self, entry_filter: EntryFilter) -> None:
        """Replace the history filter."""
        self._filter = entry_filter
        if not self._closed:
            self._recompute()

    def set_trend_window(
        self,
        window_size: Optional[int] = None,
        anchor: Optional[YearMonth] = None,
    ) -> None:
        """
        Change the trend window size and/or anchor month.

        Raises:
            ValueError: If window_size is below 1
        """
        if window_size is None:
            window_size = self._trend_window
        window_months(window_size, anchor or YearMonth.current())
        self._trend_window = window_size
        self._trend_anchor = anchor
        if not self._closed:
            self._recompute()

    # -- snapshots ---------------------------------------------------------

    def apply(self, snapshot: Snapshot) -> bool:
        """
        Apply one snapshot.

        Returns True if the views were recomputed, False if the snapshot
        was stale or the view is closed.
        """
        if self._closed:
            return False

        if snapshot.sequence <= self._last_sequence:
            self._audit_logger.log_snapshot_discarded(
                ledger_id=self.ledger_id,
                sequence=snapshot.sequence,
                last_applied=self._last_sequence,
                correlation_id=self._correlation_id,
            )
            return False

        self._entries = snapshot.entries
        self._last_sequence = snapshot.sequence
        self.last_error = None
        self._recompute()
        self._updated.set()

        self._audit_logger.log_snapshot_applied(
            ledger_id=self.ledger_id,
            sequence=snapshot.sequence,
            entry_count=len(snapshot.entries),
            correlation_id=self._correlation_id,
        )
        return True

    async def wait_for_sequence(self, sequence: int, timeout: Optional[float] = None) -> None:
        """
        Wait until a snapshot with at least this sequence has been applied.

        Raises:
            asyncio.TimeoutError: If it does not arrive in time
        """
        async def _wait() -> None:
            while self._last_sequence < sequence:
                self._updated.clear()
                await self._updated.wait()

        await asyncio.wait_for(_wait(), timeout)

    # -- subscription ------------------------------------------------------

    async def run(self) -> None:
        """
        Consume the live subscription until it ends or the view closes.

        Store failures are retried with exponential backoff. Only
        consecutive failures count against the retry budget: once a
        subscription has delivered a snapshot, the next failure starts
        with a fresh budget. When the retries run out the failure is
        reported and the last computed views stay in place.
        """
        cfg = self._store_settings

        while not self._closed:
            self._attempt = 0
            consume = retry(
                stop=stop_after_attempt(cfg.retry_attempts),
                wait=wait_exponential(
                    multiplier=cfg.retry_multiplier,
                    min=cfg.retry_min_wait,
                    max=cfg.retry_max_wait,
                ),
                retry=retry_if_exception_type(StoreUnavailable),
                reraise=True,
            )(self._consume)

            try:
                resubscribe = await consume()
            except StoreUnavailable:
                self._report("Could not reach the ledger. Showing the last loaded data.")
                return
            except StorageError as e:
                self.last_error = str(e)
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"ledger_id": self.ledger_id},
                    correlation_id=self._correlation_id,
                )
                self._report(f"Could not load the ledger: {e}")
                return

            if not resubscribe:
                return

    async def _consume(self) -> bool:
        """
        One subscription attempt.

        Returns True if the subscription failed after delivering at least
        one snapshot, False if it ended normally.

        Raises:
            StoreUnavailable: If it failed before delivering anything
        """
        self._attempt += 1
        delivered = False
        try:
            async with self._store.subscribe(self.ledger_id) as subscription:
                self.last_error = None
                self._audit_logger.log_subscription_opened(
                    ledger_id=self.ledger_id,
                    correlation_id=self._correlation_id,
                )
                try:
                    async for snapshot in subscription:
                        if self._closed:
                            break
                        delivered = True
                        self.apply(snapshot)
                finally:
                    self._audit_logger.log_subscription_closed(
                        ledger_id=self.ledger_id,
                        correlation_id=self._correlation_id,
                    )
        except StoreUnavailable as e:
            self.last_error = str(e)
            self._audit_logger.log_store_unavailable(
                ledger_id=self.ledger_id,
                error_message=str(e),
                attempt=self._attempt,
                correlation_id=self._correlation_id,
            )
            self._report(f"Ledger data could not be loaded: {e}")
            if delivered:
                return True
            raise
        return False

    def _report(self, message: str) -> None:
        if self._notify is not None:
            self._notify(message)

    def start(self) -> asyncio.Task:
        """Start consuming in a background task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def close(self) -> None:
        """Release the subscription. Later snapshots are ignored."""
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self) -> "LedgerView":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        await self.close()
        return False

    # -- export ------------------------------------------------------------

    def export(self, ledger_label: Optional[str] = None) -> ExportDocument:
        """
        Export the current history view as CSV.

        Raises:
            EmptyExportSet: If the history view is empty
        """
        try:
            document = build_export(
                self._history,
                entry_filter=self._filter,
                ledger_label=ledger_label,
                settings=self._export_settings,
            )
        except EmptyExportSet as e:
            self._audit_logger.log_export_refused(
                ledger_id=self.ledger_id,
                reason=str(e),
                correlation_id=self._correlation_id,
            )
            self._report(str(e))
            raise

        self._audit_logger.log_export_completed(
            ledger_id=self.ledger_id,
            filename=document.filename,
            row_count=document.row_count,
            correlation_id=self._correlation_id,
        )
        return document


class EntryRecordingFlow:
    """
    Orchestrates adding an entry.

    Flow:
    1. Validate → schema + semantic checks on the draft
    2. Confirm → build the immutable NewEntry
    3. Store → create it in the ledger
    4. Audit → record who added what

    Open views pick the new entry up from their next snapshot.
    """

    def __init__(
        self,
        store: EntryStoreInterface,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._audit_logger = audit_logger

    def preview(self, draft: EntryDraft) -> tuple[ValidationResult, str]:
        """Validate a draft without storing it. Returns (result, message)."""
        result = self._validator.validate(draft)
        return result, self._validator.get_user_friendly_summary(result)

    async def record(
        self,
        ledger_id: str,
        draft: EntryDraft,
        recorded_by: str,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Validate and store a new entry.

        Returns:
            The store-assigned entry id

        Raises:
            InvalidAmount, MissingFieldError, EntryValidationError: Bad draft
            NotFoundError: If the ledger does not exist
            StoreUnavailable: If the store cannot be reached
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            new_entry = self._validator.confirm(draft, recorded_by)
        except EntryValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_entry_validation_failed(
                    ledger_id=ledger_id,
                    issues=[issue.model_dump(mode="json") for issue in e.issues],
                    correlation_id=correlation_id,
                )
            raise

        if not await self._store.ledger_exists(ledger_id):
            raise NotFoundError(f"Ledger not found: {ledger_id}")

        entry_id = await self._store.create_entry(ledger_id, new_entry)

        if self._audit_logger:
            self._audit_logger.log_entry_recorded(
                ledger_id=ledger_id,
                entry_id=entry_id,
                entry_type=new_entry.type.value,
                amount=str(new_entry.amount),
                recorded_by=recorded_by,
                correlation_id=correlation_id,
            )

        return entry_id


def create_app_components(
    store: Optional[EntryStoreInterface] = None,
) -> tuple[EntryStoreInterface, EntryRecordingFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        store: Entry store backend. Defaults to an in-memory store.

    Returns:
        (store, recording_flow, audit_logger)
    """
    store = store or InMemoryEntryStore()
    audit_logger = AuditLogger()

    recording_flow = EntryRecordingFlow(
        store=store,
        validator=EntryValidator(get_settings().app),
        audit_logger=audit_logger,
    )

    return store, recording_flow, audit_logger
