"""
Monthly Summary (Aggregation Engine)

DESIGN DECISION: Aggregation is a pure function of the entry collection
and the selected month. There is no cached running total to invalidate;
every snapshot is summarized from scratch.
"""

from collections.abc import Iterable, Iterator
from decimal import Decimal

from household_ledger.models.entry import Entry, YearMonth
from household_ledger.models.views import ZERO, CategoryTotal, MonthlySummary


def entries_in_month(entries: Iterable[Entry], month: YearMonth) -> Iterator[Entry]:
    """Entries dated within [first day, last instant] of month."""
    for entry in entries:
        if month.contains(entry.date):
            yield entry


def summarize(entries: Iterable[Entry], month: YearMonth) -> MonthlySummary:
    """
    Summarize one month of the ledger.

    Totals income and expense, and breaks expenses down by category.
    The breakdown is ordered by total, largest first; categories with
    equal totals keep the order in which they were first seen.
    An empty month yields zeros and an empty breakdown.
    """
    total_income = ZERO
    total_expense = ZERO
    entry_count = 0
    by_category: dict[str, Decimal] = {}

    for entry in entries_in_month(entries, month):
        entry_count += 1
        if entry.is_income:
            total_income += entry.amount
        else:
            total_expense += entry.amount
            by_category[entry.category] = by_category.get(entry.category, ZERO) + entry.amount

    # sorted() is stable, also with reverse=True
    ordered = sorted(by_category.items(), key=lambda item: item[1], reverse=True)

    return MonthlySummary(
        month=month,
        total_income=total_income,
        total_expense=total_expense,
        net_balance=total_income - total_expense,
        category_breakdown=tuple(
            CategoryTotal(category=category, total=total)
            for category, total in ordered
        ),
        entry_count=entry_count,
    )
