"""
Household Ledger - Source Package

Analytics and query engine for a shared household ledger: several
participants record income and expense entries, and everyone sees the
same monthly summary, trend chart, history and CSV export.

DESIGN PRINCIPLES:
1. The store is the only writer; we never mutate an entry
2. Every derived view is recomputed from the latest full snapshot
3. Bad input is rejected at the boundary, not inside the engines
4. Store failures are reported, never fatal
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Ledger Team"
