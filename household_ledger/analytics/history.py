"""
Filtered History (Filter/Sort Engine)

Applies the history filter to the entry collection and returns the
matching entries newest first.
"""

from collections.abc import Iterable
from typing import Optional

from household_ledger.models.entry import Entry
from household_ledger.models.views import EntryFilter


def matches(entry: Entry, entry_filter: EntryFilter) -> bool:
    """Does the entry satisfy every constraint present in the filter?"""
    if entry_filter.month is not None and not entry_filter.month.contains(entry.date):
        return False
    if entry_filter.type is not None and entry.type != entry_filter.type:
        return False
    if entry_filter.category is not None and entry.category != entry_filter.category:
        return False
    if entry_filter.payment_method is not None:
        # Only expenses carry a payment method
        if not entry.is_expense or entry.payment_method != entry_filter.payment_method:
            return False
    return True


def query(
    entries: Iterable[Entry],
    entry_filter: Optional[EntryFilter] = None,
) -> list[Entry]:
    """
    Matching entries ordered by date, newest first.

    Entries with the same date keep their input order. The returned
    list holds the very Entry objects that were passed in.
    """
    entry_filter = entry_filter or EntryFilter()

    selected = [entry for entry in entries if matches(entry, entry_filter)]
    selected.sort(key=lambda entry: entry.date, reverse=True)
    return selected
