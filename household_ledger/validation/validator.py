"""
Two-Stage Entry Validation

DESIGN DECISION: Entries are validated at the input boundary, before they
reach the store. The analytics engines downstream may therefore assume
every amount is positive and every required field is present.

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (date, type, amount, category)
- Payment method required for expenses
- Amount must be numeric and greater than zero

STAGE 2 - SEMANTIC VALIDATION:
- Category belongs to the set for the entry type
- Payment method on an income entry (ignored)
- Unknown payment method
- Dates far in the future
- Fractional amounts (ledger amounts are whole units)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; confirm() refuses drafts with errors.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from household_ledger.config import AppSettings, get_settings
from household_ledger.models.entry import (
    PAYMENT_METHODS,
    EntryDraft,
    EntryType,
    NewEntry,
    ValidationIssue,
    ValidationResult,
    categories_for,
)


class EntryValidationError(Exception):
    """A draft could not be turned into an entry."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        self.issues = issues or []
        super().__init__(message)


class InvalidAmount(EntryValidationError):
    """Amount is missing, non-numeric, or not greater than zero."""
    pass


class MissingFieldError(EntryValidationError):
    """A required field was left empty."""
    pass


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse a typed amount.

    Accepts numbers and numeric text with thousands separators
    ("15,000"). Returns None for anything that is not a finite number.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).replace(",", "").strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if not value.is_finite():
        return None
    return value


class EntryValidator:
    """
    Validates entry drafts through a two-stage pipeline.

    Stage 2 only runs when stage 1 passes, since it relies on the
    entry type and amount being known.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        draft: EntryDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        amount = parse_amount(draft.amount)
        if draft.amount is None or (isinstance(draft.amount, str) and not draft.amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much was earned or spent",
            ))
        elif amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount ({draft.amount}) is not a number",
                severity="error",
                suggested_fix="Enter digits only, e.g. 15000",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a positive amount; the type decides income or expense",
            ))

        if draft.type is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing",
                message="Choose income or expense",
                severity="error",
            ))

        if draft.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        if not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Pick a category from the list",
            ))

        if draft.type == EntryType.EXPENSE and not draft.payment_method:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="missing",
                message="Payment method is required for expenses",
                severity="error",
                suggested_fix="Pick how the expense was paid",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        draft: EntryDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        known = categories_for(draft.type)
        if draft.category not in known:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"'{draft.category}' is not a known {draft.type.value} category",
                severity="error" if self._settings.strict_categories else "warning",
                suggested_fix=f"Known categories: {', '.join(known)}",
            ))

        if draft.type == EntryType.INCOME and draft.payment_method:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="ignored",
                message="Payment method is only kept for expenses",
                severity="info",
            ))
        elif draft.payment_method and draft.payment_method not in PAYMENT_METHODS:
            issues.append(ValidationIssue(
                field="payment_method",
                issue_type="unknown_payment_method",
                message=f"'{draft.payment_method}' is not a known payment method",
                severity="warning",
            ))

        max_future_date = date.today() + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if draft.date.date() > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date.date()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        amount = parse_amount(draft.amount)
        if amount != amount.to_integral_value():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="fractional_amount",
                message=f"Amount ({amount}) has a fractional part",
                severity="warning",
                suggested_fix="Ledger amounts are usually whole currency units",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(self, draft: EntryDraft) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(draft)
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def confirm(self, draft: EntryDraft, recorded_by: str) -> NewEntry:
        """
        Turn a draft into a NewEntry, or refuse.

        Raises:
            InvalidAmount: If the amount is missing, non-numeric or not positive
            MissingFieldError: If a required field or the recorder is missing
            EntryValidationError: For any other error-level issue
        """
        if not recorded_by:
            raise MissingFieldError("Recorder is required")

        result = self.validate(draft)
        if result.has_errors:
            errors = [issue for issue in result.issues if issue.severity == "error"]
            amount_errors = result.errors_for("amount")
            if amount_errors:
                raise InvalidAmount(amount_errors[0].message, errors)
            if any(issue.issue_type == "missing" for issue in errors):
                missing = ", ".join(i.field for i in errors if i.issue_type == "missing")
                raise MissingFieldError(f"Missing required fields: {missing}", errors)
            raise EntryValidationError(errors[0].message, errors)

        return NewEntry(
            date=draft.date,
            type=draft.type,
            amount=parse_amount(draft.amount),
            category=draft.category,
            payment_method=draft.payment_method if draft.type == EntryType.EXPENSE else None,
            memo=draft.memo or None,
            recorded_by=recorded_by,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Summary of validation results to show next to the input form.
        """
        if result.is_valid and not result.warnings:
            return "✅ Ready to save."

        lines = []

        if result.has_errors:
            lines.append("❌ This entry can't be saved yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
