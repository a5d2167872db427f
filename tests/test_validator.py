"""Tests for the two-stage entry validator."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from household_ledger.config import AppSettings
from household_ledger.models import EntryDraft, EntryType
from household_ledger.validation import (
    EntryValidationError,
    EntryValidator,
    InvalidAmount,
    MissingFieldError,
    parse_amount,
)


@pytest.fixture
def validator():
    return EntryValidator(AppSettings())


@pytest.fixture
def expense_draft():
    return EntryDraft(
        date=date(2024, 3, 5),
        type=EntryType.EXPENSE,
        amount="15,000",
        category="Food",
        payment_method="Cash",
        memo="Groceries",
    )


class TestParseAmount:
    """Tests for parse_amount()."""

    def test_thousands_separator(self):
        """Test numeric text with commas."""
        assert parse_amount("15,000") == Decimal(15000)

    def test_numbers(self):
        """Test numbers pass through."""
        assert parse_amount(Decimal("12.5")) == Decimal("12.5")
        assert parse_amount(300) == Decimal(300)

    def test_not_a_number(self):
        """Test rejected inputs."""
        for raw in (None, "", "abc", "1e", True, "NaN", "Infinity"):
            assert parse_amount(raw) is None


class TestSchemaValidation:
    """Tests for stage 1."""

    def test_valid_expense(self, validator, expense_draft):
        """Test a complete expense draft passes."""
        result = validator.validate(expense_draft)
        assert result.is_valid
        assert result.schema_valid
        assert result.semantic_valid
        assert not result.has_errors

    def test_missing_everything(self, validator):
        """Test an empty draft reports each required field."""
        result = validator.validate(EntryDraft())

        assert not result.schema_valid
        assert not result.is_valid
        fields = {issue.field for issue in result.issues if issue.severity == "error"}
        assert fields == {"amount", "type", "date", "category"}

    def test_expense_requires_payment_method(self, validator, expense_draft):
        """Test expenses need a payment method."""
        draft = expense_draft.model_copy(update={"payment_method": None})
        result = validator.validate(draft)

        assert not result.is_valid
        assert result.errors_for("payment_method")[0].issue_type == "missing"

    def test_income_does_not_require_payment_method(self, validator):
        """Test income drafts without a payment method."""
        draft = EntryDraft(
            date=date(2024, 3, 10),
            type=EntryType.INCOME,
            amount=500000,
            category="Salary",
        )
        assert validator.validate(draft).is_valid

    def test_non_positive_amount(self, validator, expense_draft):
        """Test zero and negative amounts are errors."""
        for amount in ("0", "-15000"):
            draft = expense_draft.model_copy(update={"amount": amount})
            result = validator.validate(draft)
            assert result.errors_for("amount")[0].issue_type == "invalid_value"

    def test_non_numeric_amount(self, validator, expense_draft):
        """Test text amounts are errors."""
        draft = expense_draft.model_copy(update={"amount": "fifteen"})
        assert validator.validate(draft).errors_for("amount")


class TestSemanticValidation:
    """Tests for stage 2."""

    def test_unknown_category_warns(self, validator, expense_draft):
        """Test an unknown category is a warning by default."""
        draft = expense_draft.model_copy(update={"category": "Snacks"})
        result = validator.validate(draft)

        assert result.is_valid
        assert any("Snacks" in warning for warning in result.warnings)

    def test_unknown_category_strict(self, expense_draft):
        """Test strict mode turns an unknown category into an error."""
        validator = EntryValidator(AppSettings(strict_categories=True))
        draft = expense_draft.model_copy(update={"category": "Salary"})
        result = validator.validate(draft)

        assert result.schema_valid
        assert not result.semantic_valid
        assert result.errors_for("category")[0].issue_type == "unknown_category"

    def test_future_date_warns(self, validator, expense_draft):
        """Test dates far in the future are flagged."""
        draft = expense_draft.model_copy(
            update={"date": expense_draft.date.replace(year=date.today().year + 2)}
        )
        result = validator.validate(draft)
        assert any(issue.issue_type == "future_date" for issue in result.issues)

    def test_near_future_date_accepted(self, validator, expense_draft):
        """Test dates within the tolerance pass quietly."""
        soon = date.today() + timedelta(days=3)
        draft = expense_draft.model_copy(update={"date": expense_draft.date.replace(
            year=soon.year, month=soon.month, day=soon.day,
        )})
        result = validator.validate(draft)
        assert not any(issue.issue_type == "future_date" for issue in result.issues)

    def test_fractional_amount_warns(self, validator, expense_draft):
        """Test fractional amounts are flagged but allowed."""
        draft = expense_draft.model_copy(update={"amount": "12.50"})
        result = validator.validate(draft)
        assert result.is_valid
        assert any(issue.issue_type == "fractional_amount" for issue in result.issues)

    def test_payment_method_on_income_is_info(self, validator):
        """Test a payment method on income is only informational."""
        draft = EntryDraft(
            date=date(2024, 3, 10),
            type=EntryType.INCOME,
            amount=500000,
            category="Salary",
            payment_method="Cash",
        )
        result = validator.validate(draft)
        assert result.is_valid
        assert result.issues[0].severity == "info"


class TestConfirm:
    """Tests for confirm()."""

    def test_confirm_builds_new_entry(self, validator, expense_draft):
        """Test a valid draft becomes a NewEntry."""
        entry = validator.confirm(expense_draft, recorded_by="uid-1")

        assert entry.amount == Decimal(15000)
        assert entry.type == EntryType.EXPENSE
        assert entry.payment_method == "Cash"
        assert entry.recorded_by == "uid-1"

    def test_confirm_drops_payment_method_for_income(self, validator):
        """Test income entries never carry a payment method."""
        draft = EntryDraft(
            date=date(2024, 3, 10),
            type=EntryType.INCOME,
            amount="500000",
            category="Salary",
            payment_method="Cash",
            memo="",
        )
        entry = validator.confirm(draft, recorded_by="uid-1")
        assert entry.payment_method is None
        assert entry.memo is None

    def test_confirm_invalid_amount(self, validator, expense_draft):
        """Test a bad amount raises InvalidAmount."""
        draft = expense_draft.model_copy(update={"amount": "-1"})
        with pytest.raises(InvalidAmount) as exc_info:
            validator.confirm(draft, recorded_by="uid-1")
        assert exc_info.value.issues

    def test_confirm_missing_category(self, validator, expense_draft):
        """Test a missing category raises MissingFieldError."""
        draft = expense_draft.model_copy(update={"category": ""})
        with pytest.raises(MissingFieldError, match="category"):
            validator.confirm(draft, recorded_by="uid-1")

    def test_confirm_missing_recorder(self, validator, expense_draft):
        """Test entries need a recorder."""
        with pytest.raises(MissingFieldError):
            validator.confirm(expense_draft, recorded_by="")

    def test_confirm_strict_category(self, expense_draft):
        """Test other errors raise the base EntryValidationError."""
        validator = EntryValidator(AppSettings(strict_categories=True))
        draft = expense_draft.model_copy(update={"category": "Snacks"})
        with pytest.raises(EntryValidationError) as exc_info:
            validator.confirm(draft, recorded_by="uid-1")
        assert not isinstance(exc_info.value, (InvalidAmount, MissingFieldError))


class TestUserFriendlySummary:
    """Tests for the form message."""

    def test_ready(self, validator, expense_draft):
        result = validator.validate(expense_draft)
        assert validator.get_user_friendly_summary(result) == "✅ Ready to save."

    def test_errors_listed(self, validator):
        result = validator.validate(EntryDraft())
        message = validator.get_user_friendly_summary(result)
        assert message.startswith("❌")
        assert "Amount is required" in message


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
