"""
Core Data Models for Household Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Stay immutable once handed to the analytics engines

DESIGN DECISION: An entry moves through three shapes.
EntryDraft is raw input (anything may be missing or malformed),
NewEntry is validated and ready for the store, and Entry is what the
store hands back with its assigned id. Only the validator turns a draft
into a NewEntry.
"""

import calendar
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from functools import total_ordering
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS AND KNOWN LABELS
# =============================================================================

class EntryType(str, Enum):
    """Direction of a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"


# Category sets recognized by the input layer. The analytics engines treat
# categories as opaque strings and never consult these.
EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food",
    "Transportation",
    "Communication",
    "Culture & Leisure",
    "Medical",
    "Education",
    "Housing",
    "Family Events",
    "Clothing & Beauty",
    "Hobbies",
    "Loan Repayment",
    "Taxes & Insurance",
    "Gifts & Donations",
    "Vehicle Maintenance",
    "Other Expense",
)

INCOME_CATEGORIES: tuple[str, ...] = (
    "Salary",
    "Side Income",
    "Investment Income",
    "Bonus",
    "Allowance",
    "Refund",
    "Other Income",
)

PAYMENT_METHODS: tuple[str, ...] = (
    "Cash",
    "Credit Card",
    "Debit Card",
    "Mobile Payment",
    "Bank Transfer",
    "Gift Card",
    "Points",
    "Other Payment",
)


def categories_for(entry_type: EntryType) -> tuple[str, ...]:
    """Known category labels for an entry type."""
    if entry_type == EntryType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


def _promote_date(value: Any) -> Any:
    """Accept a plain date where a datetime is expected (midnight)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _local_wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    """Entry dates are naive local time; aware values are converted."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# =============================================================================
# CALENDAR MONTH
# =============================================================================

_YEAR_MONTH_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


@total_ordering
class YearMonth(BaseModel):
    """
    A calendar month identified by (year, month).

    Ordering and equality use the integer pair, never a display label.
    Accepts "YYYY-MM" text and date/datetime values wherever a
    YearMonth field is validated.
    """
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @model_validator(mode='before')
    @classmethod
    def coerce_input(cls, data: Any) -> Any:
        if isinstance(data, str):
            match = _YEAR_MONTH_PATTERN.match(data)
            if not match:
                raise ValueError(f"Expected YYYY-MM, got {data!r}")
            return {"year": int(match.group(1)), "month": int(match.group(2))}
        if isinstance(data, date):
            return {"year": data.year, "month": data.month}
        return data

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """Parse "YYYY-MM"."""
        return cls.model_validate(text)

    @classmethod
    def of(cls, value: date) -> "YearMonth":
        """The month a date or datetime falls in."""
        return cls(year=value.year, month=value.month)

    @classmethod
    def current(cls, today: Optional[date] = None) -> "YearMonth":
        """The month containing today (local time)."""
        return cls.of(today or date.today())

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)

    def shift(self, months: int) -> "YearMonth":
        """Move forward (positive) or backward (negative) by whole months."""
        year, index = divmod(self.year * 12 + (self.month - 1) + months, 12)
        return YearMonth(year=year, month=index + 1)

    def first_day(self) -> datetime:
        return datetime(self.year, self.month, 1)

    def last_instant(self) -> datetime:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return datetime.combine(date(self.year, self.month, last_day), time.max)

    def contains(self, moment: date) -> bool:
        """Is the date or datetime within [first_day, last_instant]?"""
        return (moment.year, moment.month) == self.key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, YearMonth):
            return NotImplemented
        return self.key < other.key

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


# =============================================================================
# ENTRIES
# =============================================================================

class EntryDraft(BaseModel):
    """
    Raw entry input as typed by a participant.

    CRITICAL: This is PROPOSED data, NOT verified.
    Every field is optional and the amount may still be text;
    EntryValidator decides whether it becomes a NewEntry.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: Optional[datetime] = None
    type: Optional[EntryType] = None
    amount: Optional[Union[Decimal, str]] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None
    memo: Optional[str] = None

    @field_validator('date', mode='before')
    @classmethod
    def promote_date(cls, v: Any) -> Any:
        return _promote_date(v)

    @field_validator('date')
    @classmethod
    def naive_local_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _local_wall_clock(v)


class NewEntry(BaseModel):
    """
    A validated entry that has not been stored yet.

    The store assigns the id when it accepts the entry.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: datetime = Field(
        ...,
        description="When the income/expense happened, naive local time (day granularity)"
    )
    type: EntryType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Whole currency units, always positive"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    payment_method: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Only meaningful for expenses"
    )
    memo: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    recorded_by: str = Field(
        ...,
        min_length=1,
        description="Participant who recorded the entry"
    )

    @field_validator('date', mode='before')
    @classmethod
    def promote_date(cls, v: Any) -> Any:
        return _promote_date(v)

    @field_validator('date')
    @classmethod
    def naive_local_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _local_wall_clock(v)

    @property
    def year_month(self) -> YearMonth:
        return YearMonth.of(self.date)

    @property
    def is_income(self) -> bool:
        return self.type == EntryType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EntryType.EXPENSE


class Entry(NewEntry):
    """An entry as delivered by the store. Immutable."""

    id: str = Field(
        ...,
        min_length=1,
        description="Store-assigned identifier"
    )

    @classmethod
    def from_new(cls, entry_id: str, new_entry: NewEntry) -> "Entry":
        return cls(id=entry_id, **new_entry.model_dump())


class Snapshot(BaseModel):
    """
    A full, point-in-time replacement view of one ledger's entries.

    The store tags each snapshot of a ledger with a strictly increasing
    sequence number so subscribers can drop late, stale deliveries.
    """
    model_config = ConfigDict(frozen=True)

    ledger_id: str
    sequence: int = Field(..., ge=0)
    entries: tuple[Entry, ...] = ()
    received_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_category')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage entry validation.

    Stage 1: Schema validation (required fields, amount)
    Stage 2: Semantic validation (category/type consistency, dates)
    """

    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def errors_for(self, field: str) -> list[ValidationIssue]:
        return [
            issue for issue in self.issues
            if issue.field == field and issue.severity == "error"
        ]
