"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of what each live view showed and why
2. Debugging capability when the store misbehaves
3. User can see history of their interactions

The audit logger:
- Is synchronous, since it is called from snapshot handlers that must
  recompute and return without awaiting
- Keeps a bounded in-memory history for display
- Supports correlation IDs to trace related events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. A bounded in-memory history (for user visibility)
    """

    def __init__(self, history_size: int = 100):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
                    0 disables the history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("household_ledger.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history))[:limit]

    def log_subscription_opened(
        self,
        ledger_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that a live view subscribed to a ledger."""
        self.log(AuditEventBuilder.subscription_opened(
            ledger_id=ledger_id,
            correlation_id=correlation_id,
        ))

    def log_subscription_closed(
        self,
        ledger_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that a subscription was released."""
        self.log(AuditEventBuilder.subscription_closed(
            ledger_id=ledger_id,
            correlation_id=correlation_id,
        ))

    def log_snapshot_applied(
        self,
        ledger_id: str,
        sequence: int,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.snapshot_applied(
            ledger_id=ledger_id,
            sequence=sequence,
            entry_count=entry_count,
            correlation_id=correlation_id,
        ))

    def log_snapshot_discarded(
        self,
        ledger_id: str,
        sequence: int,
        last_applied: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.snapshot_discarded(
            ledger_id=ledger_id,
            sequence=sequence,
            last_applied=last_applied,
            correlation_id=correlation_id,
        ))

    def log_store_unavailable(
        self,
        ledger_id: str,
        error_message: str,
        attempt: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed subscription or delivery."""
        self.log(AuditEventBuilder.store_unavailable(
            ledger_id=ledger_id,
            error_message=error_message,
            attempt=attempt,
            correlation_id=correlation_id,
        ))

    def log_entry_validation_failed(
        self,
        ledger_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        self.log(AuditEventBuilder.entry_validation_failed(
            ledger_id=ledger_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_entry_recorded(
        self,
        ledger_id: str,
        entry_id: str,
        entry_type: str,
        amount: str,
        recorded_by: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log entry creation."""
        self.log(AuditEventBuilder.entry_recorded(
            ledger_id=ledger_id,
            entry_id=entry_id,
            entry_type=entry_type,
            amount=amount,
            recorded_by=recorded_by,
            correlation_id=correlation_id,
        ))

    def log_export_completed(
        self,
        ledger_id: str,
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.export_completed(
            ledger_id=ledger_id,
            filename=filename,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    def log_export_refused(
        self,
        ledger_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.export_refused(
            ledger_id=ledger_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (opening a view,
    recording an entry). Pass it through all subsequent operations.
    """
    return uuid4()
