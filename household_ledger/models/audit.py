"""
Audit Models for Household Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every snapshot that changed what users see
2. Debugging information when the store misbehaves
3. A record of who added which entry

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Live view
    SUBSCRIPTION_OPENED = "subscription_opened"
    SUBSCRIPTION_CLOSED = "subscription_closed"
    SNAPSHOT_APPLIED = "snapshot_applied"
    SNAPSHOT_DISCARDED = "snapshot_discarded"
    STORE_UNAVAILABLE = "store_unavailable"

    # Entry input
    ENTRY_VALIDATION_FAILED = "entry_validation_failed"
    ENTRY_RECORDED = "entry_recorded"

    # Export
    EXPORT_COMPLETED = "export_completed"
    EXPORT_REFUSED = "export_refused"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What is this about? ledger ids and entry ids are opaque store strings
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'ledger', 'entry', 'export')"
    )
    entity_id: Optional[str] = None

    # Groups all events of one view session or one input action
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.snapshot_applied(ledger_id, 7, 42, correlation_id)
        event = AuditEventBuilder.export_refused(ledger_id, "no entries", correlation_id)
    """

    @staticmethod
    def subscription_opened(
        ledger_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_OPENED,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description="Live subscription opened",
        )

    @staticmethod
    def subscription_closed(
        ledger_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CLOSED,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description="Live subscription released",
        )

    @staticmethod
    def snapshot_applied(
        ledger_id: str,
        sequence: int,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_APPLIED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description=f"Snapshot {sequence} applied with {entry_count} entries",
            details={
                "sequence": sequence,
                "entry_count": entry_count,
            },
        )

    @staticmethod
    def snapshot_discarded(
        ledger_id: str,
        sequence: int,
        last_applied: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_DISCARDED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description=f"Stale snapshot {sequence} discarded (already at {last_applied})",
            details={
                "sequence": sequence,
                "last_applied": last_applied,
            },
        )

    @staticmethod
    def store_unavailable(
        ledger_id: str,
        error_message: str,
        attempt: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_UNAVAILABLE,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description=f"Entry store unavailable (attempt {attempt})",
            error_message=error_message,
            details={
                "attempt": attempt,
            },
        )

    @staticmethod
    def entry_validation_failed(
        ledger_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description=f"Entry rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def entry_recorded(
        ledger_id: str,
        entry_id: str,
        entry_type: str,
        amount: str,
        recorded_by: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_RECORDED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"{entry_type.capitalize()} of {amount} recorded",
            details={
                "ledger_id": ledger_id,
                "entry_type": entry_type,
                "amount": amount,
                "recorded_by": recorded_by,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_completed(
        ledger_id: str,
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="export",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description=f"Exported {row_count} entries to {filename}",
            details={
                "filename": filename,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_refused(
        ledger_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type="export",
            entity_id=ledger_id,
            correlation_id=correlation_id,
            description="Export refused",
            details={
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
