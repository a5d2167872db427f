"""
CSV Export (Tabular Exporter)

Renders an ordered entry sequence (normally the filtered history) as a
spreadsheet-friendly CSV document.

FORMAT:
- Header row, then one row per entry in the order given
- Every text field is double-quoted, embedded quotes are doubled
- The amount is written as a bare number
- A UTF-8 byte-order mark is prepended so spreadsheet tools pick the
  right encoding for non-ASCII categories and memos

DESIGN DECISION: Exporting nothing is refused with EmptyExportSet rather
than producing a header-only file, which users mistake for a bug.
"""

import csv
import io
import re
from collections.abc import Iterable
from typing import Optional

from household_ledger.config import ExportSettings, get_settings
from household_ledger.models.entry import Entry
from household_ledger.models.views import EntryFilter, ExportDocument


BOM = "\ufeff"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


class EmptyExportSet(Exception):
    """Export was requested but no entries match the current filter."""

    def __init__(
        self,
        message: str = "There are no entries to export for the current filter.",
    ):
        super().__init__(message)


def entry_to_row(entry: Entry, settings: ExportSettings) -> list:
    """One CSV row. The amount stays numeric so the writer leaves it unquoted."""
    return [
        entry.date.strftime(settings.date_format),
        settings.income_label if entry.is_income else settings.expense_label,
        entry.category,
        entry.amount,
        (entry.payment_method or "") if entry.is_expense else "",
        entry.memo or "",
        entry.recorded_by[: settings.recorder_display_length],
    ]


def export(
    entries: Iterable[Entry],
    settings: Optional[ExportSettings] = None,
) -> str:
    """Render entries as CSV text, in the order given."""
    settings = settings or get_settings().export

    buffer = io.StringIO()
    if settings.include_bom:
        buffer.write(BOM)

    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(settings.headers_list)
    for entry in entries:
        writer.writerow(entry_to_row(entry, settings))

    return buffer.getvalue()


def export_filename(ledger_label: str, month_token: str) -> str:
    """<ledger-label>_<month-or-all>.csv, with path-unsafe characters replaced."""
    label = _UNSAFE_FILENAME_CHARS.sub("_", ledger_label).strip("_") or "ledger"
    return f"{label}_{month_token}.csv"


def build_export(
    entries: Iterable[Entry],
    entry_filter: Optional[EntryFilter] = None,
    ledger_label: Optional[str] = None,
    settings: Optional[ExportSettings] = None,
) -> ExportDocument:
    """
    Build the downloadable document for the current history view.

    Raises:
        EmptyExportSet: If there is nothing to export
    """
    settings = settings or get_settings().export
    entries = list(entries)
    if not entries:
        raise EmptyExportSet()

    entry_filter = entry_filter or EntryFilter()
    label = ledger_label or get_settings().ledger.default_label

    return ExportDocument(
        filename=export_filename(label, entry_filter.month_token(settings.all_token)),
        content=export(entries, settings),
        row_count=len(entries),
    )
