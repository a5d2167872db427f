"""Analytics engines: monthly summary, trend series and filtered history."""

from household_ledger.analytics.history import matches, query
from household_ledger.analytics.summary import entries_in_month, summarize
from household_ledger.analytics.trend import DEFAULT_TREND_WINDOW, trend, window_months

__all__ = [
    "DEFAULT_TREND_WINDOW",
    "entries_in_month",
    "matches",
    "query",
    "summarize",
    "trend",
    "window_months",
]
