"""Entry validation package."""

from household_ledger.validation.validator import (
    EntryValidationError,
    EntryValidator,
    InvalidAmount,
    MissingFieldError,
    parse_amount,
)

__all__ = [
    "EntryValidationError",
    "EntryValidator",
    "InvalidAmount",
    "MissingFieldError",
    "parse_amount",
]
