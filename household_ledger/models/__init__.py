"""
Data Models Package

This package contains all Pydantic models used in the Household Ledger system.
All data flowing through the system must conform to these schemas.
"""

from household_ledger.models.entry import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    PAYMENT_METHODS,
    Entry,
    EntryDraft,
    EntryType,
    NewEntry,
    Snapshot,
    ValidationIssue,
    ValidationResult,
    YearMonth,
    categories_for,
)
from household_ledger.models.views import (
    ALL,
    CategoryTotal,
    EntryFilter,
    ExportDocument,
    MonthlySummary,
    TrendPoint,
)
from household_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entry models
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "PAYMENT_METHODS",
    "Entry",
    "EntryDraft",
    "EntryType",
    "NewEntry",
    "Snapshot",
    "ValidationIssue",
    "ValidationResult",
    "YearMonth",
    "categories_for",
    # View models
    "ALL",
    "CategoryTotal",
    "EntryFilter",
    "ExportDocument",
    "MonthlySummary",
    "TrendPoint",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
