"""
Derived View Models

Everything the analytics engines return. These are plain, immutable
values: recomputed from scratch for every snapshot, never patched.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from household_ledger.models.entry import EntryType, YearMonth


# Filter value meaning "no constraint", as sent by selection widgets
ALL = "all"

ZERO = Decimal(0)


class CategoryTotal(BaseModel):
    """Expense total for one category in one month."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal


class MonthlySummary(BaseModel):
    """Income, expense and per-category breakdown for one month."""
    model_config = ConfigDict(frozen=True)

    month: YearMonth
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_balance: Decimal = ZERO
    category_breakdown: tuple[CategoryTotal, ...] = ()
    entry_count: int = Field(default=0, ge=0)

    @property
    def overspent(self) -> bool:
        """Spent more than earned this month (only once there is income)."""
        return self.total_income > 0 and self.total_expense > self.total_income


class TrendPoint(BaseModel):
    """One month of the trailing trend series."""
    model_config = ConfigDict(frozen=True)

    month: YearMonth
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expense

    @property
    def label(self) -> str:
        # Display only; series order comes from month.key
        return self.month.first_day().strftime("%b %Y")


class EntryFilter(BaseModel):
    """
    History filter. Every field is optional; None, "" and "all"
    impose no constraint. Present fields are combined with AND.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    month: Optional[YearMonth] = None
    type: Optional[EntryType] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator('month', 'type', 'category', 'payment_method', mode='before')
    @classmethod
    def unset_when_all(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ("", ALL):
            return None
        return v

    @property
    def is_empty(self) -> bool:
        return (
            self.month is None
            and self.type is None
            and self.category is None
            and self.payment_method is None
        )

    def month_token(self, all_token: str = ALL) -> str:
        """Filename token: "YYYY-MM" for a month filter, else the all-token."""
        return str(self.month) if self.month else all_token


class ExportDocument(BaseModel):
    """A rendered CSV export ready to be downloaded or written to disk."""
    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    content: str
    row_count: int = Field(..., ge=0)
    media_type: str = "text/csv;charset=utf-8"

    def to_bytes(self) -> bytes:
        return self.content.encode("utf-8")

    def write_to(self, directory: Path) -> Path:
        """Write the document into directory, overwriting. Returns the path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.to_bytes())
        return path
