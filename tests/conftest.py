"""Shared fixtures for the Household Ledger tests."""

from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest

from household_ledger.config import StoreSettings
from household_ledger.models import Entry, EntryType
from household_ledger.services.storage import InMemoryEntryStore


@pytest.fixture
def make_entry():
    """Factory for stored entries with sensible defaults."""
    ids = count(1)

    def _make(
        day: str,
        entry_type: EntryType,
        amount,
        category: str,
        payment_method=None,
        memo=None,
        recorded_by: str = "uid-0123456789abcdef",
        entry_id=None,
    ) -> Entry:
        if payment_method is None and entry_type == EntryType.EXPENSE:
            payment_method = "Credit Card"
        return Entry(
            id=entry_id or f"e{next(ids)}",
            date=datetime.fromisoformat(day),
            type=entry_type,
            amount=Decimal(str(amount)),
            category=category,
            payment_method=payment_method,
            memo=memo,
            recorded_by=recorded_by,
        )

    return _make


@pytest.fixture
def sample_entries(make_entry):
    """Two March entries and one February expense."""
    return [
        make_entry("2024-03-05", EntryType.EXPENSE, 15000, "Food"),
        make_entry("2024-03-10", EntryType.INCOME, 500000, "Salary"),
        make_entry("2024-02-20", EntryType.EXPENSE, 8000, "Food"),
    ]


@pytest.fixture
def store():
    return InMemoryEntryStore()


@pytest.fixture
def fast_retry():
    """Retry policy without waiting between attempts."""
    return StoreSettings(
        retry_attempts=3,
        retry_multiplier=0,
        retry_min_wait=0,
        retry_max_wait=0,
    )
