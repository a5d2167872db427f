"""CSV export package."""

from household_ledger.export.csv_export import (
    BOM,
    EmptyExportSet,
    build_export,
    entry_to_row,
    export,
    export_filename,
)

__all__ = [
    "BOM",
    "EmptyExportSet",
    "build_export",
    "entry_to_row",
    "export",
    "export_filename",
]
