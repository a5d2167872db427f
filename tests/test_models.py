"""
Tests for Household Ledger

Test strategy:
1. Unit tests for individual components (models, engines, validators)
2. Integration tests for flows (with the in-memory store)
3. No external services in tests
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from household_ledger.models import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Entry,
    EntryDraft,
    EntryFilter,
    EntryType,
    ExportDocument,
    MonthlySummary,
    NewEntry,
    Snapshot,
    TrendPoint,
    ValidationIssue,
    ValidationResult,
    YearMonth,
    categories_for,
)


class TestYearMonth:
    """Tests for the calendar month value."""

    def test_parse(self):
        """Test parsing YYYY-MM text."""
        month = YearMonth.parse("2024-03")
        assert month.year == 2024
        assert month.month == 3
        assert str(month) == "2024-03"

    def test_parse_rejects_other_formats(self):
        """Test that display labels are not accepted as months."""
        with pytest.raises(ValidationError):
            YearMonth.parse("Mar 2024")

    def test_month_out_of_range(self):
        """Test that month 13 is rejected."""
        with pytest.raises(ValidationError):
            YearMonth(year=2024, month=13)

    def test_of_date(self):
        """Test the month of a date and of a datetime."""
        assert YearMonth.of(date(2024, 3, 31)) == YearMonth(year=2024, month=3)
        assert YearMonth.of(datetime(2023, 12, 1, 8, 30)) == YearMonth(year=2023, month=12)

    def test_shift_across_year_boundary(self):
        """Test moving backward and forward across January."""
        january = YearMonth(year=2024, month=1)
        assert january.shift(-1) == YearMonth(year=2023, month=12)
        assert january.shift(-13) == YearMonth(year=2022, month=12)
        assert january.shift(12) == YearMonth(year=2025, month=1)

    def test_ordering_is_chronological(self):
        """Test ordering uses (year, month), not text."""
        months = [
            YearMonth.parse("2024-10"),
            YearMonth.parse("2023-12"),
            YearMonth.parse("2024-02"),
        ]
        assert [str(m) for m in sorted(months)] == ["2023-12", "2024-02", "2024-10"]

    def test_contains_whole_last_day(self):
        """Test the month window includes its last instant."""
        february = YearMonth.parse("2024-02")
        assert february.contains(datetime(2024, 2, 29, 23, 59, 59))
        assert february.contains(date(2024, 2, 1))
        assert not february.contains(datetime(2024, 3, 1))
        assert february.last_instant().day == 29

    def test_hashable(self):
        """Test months can key dictionaries."""
        totals = {YearMonth.parse("2024-03"): 1}
        assert totals[YearMonth(year=2024, month=3)] == 1


class TestEntryModels:
    """Tests for entry-related Pydantic models."""

    def test_new_entry_creation(self):
        """Test NewEntry model creation."""
        entry = NewEntry(
            date=date(2024, 3, 5),
            type=EntryType.EXPENSE,
            amount=Decimal("15000"),
            category="Food",
            payment_method="Cash",
            recorded_by="uid-1",
        )
        assert entry.date == datetime(2024, 3, 5)
        assert entry.is_expense
        assert not entry.is_income
        assert entry.year_month == YearMonth.parse("2024-03")

    def test_new_entry_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-100")):
            with pytest.raises(ValidationError):
                NewEntry(
                    date=date(2024, 3, 5),
                    type=EntryType.INCOME,
                    amount=amount,
                    category="Salary",
                    recorded_by="uid-1",
                )

    def test_entry_is_immutable(self, make_entry):
        """Test that stored entries cannot be modified."""
        entry = make_entry("2024-03-05", EntryType.EXPENSE, 15000, "Food")
        with pytest.raises(ValidationError):
            entry.amount = Decimal("1")

    def test_entry_from_new(self):
        """Test attaching a store id to a new entry."""
        new_entry = NewEntry(
            date=date(2024, 3, 10),
            type=EntryType.INCOME,
            amount=Decimal("500000"),
            category="Salary",
            recorded_by="uid-1",
        )
        entry = Entry.from_new("abc", new_entry)
        assert entry.id == "abc"
        assert entry.amount == Decimal("500000")
        assert entry.payment_method is None

    def test_dates_are_naive_local(self):
        """Test offset timestamps become naive local wall-clock time."""
        stamped = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)
        entry = NewEntry(
            date=stamped,
            type=EntryType.INCOME,
            amount=Decimal("500000"),
            category="Salary",
            recorded_by="uid-1",
        )
        assert entry.date.tzinfo is None
        assert entry.date == stamped.astimezone().replace(tzinfo=None)

        draft = EntryDraft(date="2024-03-06T12:00:00+09:00")
        assert draft.date.tzinfo is None

    def test_draft_accepts_partial_input(self):
        """Test that a draft may be incomplete."""
        draft = EntryDraft(amount="  15,000 ")
        assert draft.amount == "15,000"
        assert draft.type is None

    def test_categories_for_type(self):
        """Test the category set follows the entry type."""
        assert categories_for(EntryType.INCOME) == INCOME_CATEGORIES
        assert categories_for(EntryType.EXPENSE) == EXPENSE_CATEGORIES
        assert "Salary" in INCOME_CATEGORIES
        assert "Food" in EXPENSE_CATEGORIES


class TestSnapshot:
    """Tests for the snapshot model."""

    def test_snapshot_keeps_entry_identity(self, sample_entries):
        """Test snapshots hold the very entries they were given."""
        snapshot = Snapshot(ledger_id="l1", sequence=3, entries=tuple(sample_entries))
        assert snapshot.entries[0] is sample_entries[0]
        assert snapshot.received_at is not None

    def test_snapshot_sequence_non_negative(self):
        """Test negative sequence numbers are rejected."""
        with pytest.raises(ValidationError):
            Snapshot(ledger_id="l1", sequence=-1)


class TestViewModels:
    """Tests for derived view models."""

    def test_overspent(self):
        """Test overspending only counts once there is income."""
        month = YearMonth.parse("2024-03")
        assert MonthlySummary(
            month=month, total_income=Decimal(100), total_expense=Decimal(150)
        ).overspent
        assert not MonthlySummary(
            month=month, total_income=Decimal(0), total_expense=Decimal(150)
        ).overspent

    def test_trend_point_label_and_net(self):
        """Test the display label and net of a trend point."""
        point = TrendPoint(
            month=YearMonth.parse("2024-03"),
            income=Decimal(500),
            expense=Decimal(200),
        )
        assert point.label == "Mar 2024"
        assert point.net == Decimal(300)

    def test_filter_all_means_unset(self):
        """Test "all" and empty values impose no constraint."""
        entry_filter = EntryFilter(month="all", type="", category="all", payment_method=None)
        assert entry_filter.is_empty

    def test_filter_parses_values(self):
        """Test filter values are parsed into their types."""
        entry_filter = EntryFilter(month="2024-03", type="expense", category="Food")
        assert entry_filter.month == YearMonth(year=2024, month=3)
        assert entry_filter.type == EntryType.EXPENSE
        assert entry_filter.month_token() == "2024-03"
        assert EntryFilter().month_token("all") == "all"

    def test_export_document_write(self, tmp_path):
        """Test writing an export document to disk."""
        document = ExportDocument(filename="x_all.csv", content="\ufeffa,b\n", row_count=0)
        path = document.write_to(tmp_path / "out")
        assert path.name == "x_all.csv"
        assert path.read_bytes() == "\ufeffa,b\n".encode("utf-8")


class TestValidationModels:
    """Tests for validation models."""

    def test_validation_issue_creation(self):
        """Test ValidationIssue model."""
        issue = ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
            severity="error",
            suggested_fix="Enter how much was earned or spent",
        )
        assert issue.severity == "error"

    def test_validation_issue_severity_pattern(self):
        """Test unknown severities are rejected."""
        with pytest.raises(ValidationError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Required",
                    severity="error",
                ),
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors
        assert result.error_count == 1
        assert len(result.errors_for("amount")) == 1
        assert result.errors_for("date") == []


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_RECORDED,
            description="Income of 500000 recorded",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_builder_snapshot_discarded(self):
        """Test AuditEventBuilder for stale snapshots."""
        correlation_id = uuid4()
        event = AuditEventBuilder.snapshot_discarded(
            ledger_id="l1",
            sequence=4,
            last_applied=5,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.SNAPSHOT_DISCARDED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["last_applied"] == 5
        assert event.correlation_id == correlation_id

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.store_unavailable(
            ledger_id="l1",
            error_message="connection reset",
            attempt=2,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "store_unavailable"
        assert log_dict["severity"] == "error"
        assert log_dict["entity_id"] == "l1"
        assert log_dict["error_message"] == "connection reset"
        assert log_dict["correlation_id"] is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
