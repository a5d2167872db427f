"""
Trailing Trend Series (Trend Engine)

Builds a fixed-length, gap-free series of monthly income/expense totals
ending at an anchor month, for charts and reports.

DESIGN DECISION: Buckets are keyed and ordered by the (year, month)
integer pair. Display labels are derived from the month and never
parsed back for sorting.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from household_ledger.models.entry import Entry, YearMonth
from household_ledger.models.views import ZERO, TrendPoint


DEFAULT_TREND_WINDOW = 6


def window_months(window_size: int, anchor: YearMonth) -> list[YearMonth]:
    """The window_size consecutive months ending at anchor, oldest first."""
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")
    return [anchor.shift(offset) for offset in range(1 - window_size, 1)]


def trend(
    entries: Iterable[Entry],
    window_size: int = DEFAULT_TREND_WINDOW,
    anchor: Optional[YearMonth] = None,
) -> list[TrendPoint]:
    """
    Monthly income and expense for the trailing window.

    Always returns exactly window_size points in chronological order,
    zero-filled for months without entries. Entries outside the window
    are ignored.
    """
    months = window_months(window_size, anchor or YearMonth.current())

    income: dict[tuple[int, int], Decimal] = {month.key: ZERO for month in months}
    expense: dict[tuple[int, int], Decimal] = dict(income)

    for entry in entries:
        key = (entry.date.year, entry.date.month)
        if key not in income:
            continue
        if entry.is_income:
            income[key] += entry.amount
        else:
            expense[key] += entry.amount

    return [
        TrendPoint(month=month, income=income[month.key], expense=expense[month.key])
        for month in sorted(months)
    ]
