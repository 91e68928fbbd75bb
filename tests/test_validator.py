"""Tests for the two-stage input validator."""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.config import AppSettings
from expense_tracker.models.expense import RawExpenseInput
from expense_tracker.validation import ExpenseInputValidator


TODAY = date(2024, 6, 15)


@pytest.fixture
def validator():
    settings = AppSettings(
        currency_symbol="$",
        future_date_tolerance_days=7,
        max_expense_amount=5000,
    )
    return ExpenseInputValidator(settings, today=TODAY)


def issue_fields(result, severity):
    return [issue.field for issue in result.issues if issue.severity == severity]


class TestSchemaStage:

    def test_valid_input_builds_expense(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="7.13", date="2024-03-01",
        ))
        assert result.is_valid
        assert result.issues == []
        assert result.expense.amount == Decimal("7.13")
        assert result.expense.date == date(2024, 3, 1)

    def test_blank_date_means_today(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="7.13", date="  ",
        ))
        assert result.expense.date == TODAY

    def test_currency_symbol_and_separators_tolerated(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Rent", payee="Landlord", amount="$ 1,200.00", date="2024-06-01",
        ))
        assert result.expense.amount == Decimal("1200.00")

    @pytest.mark.parametrize("amount", ["7,13", "1,2,3", "12,34.50", "1200,00"])
    def test_comma_outside_thousands_grouping_is_error(self, validator, amount):
        """Test a decimal comma is reported, never read as a larger amount."""
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount=amount, date="2024-03-01",
        ))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "invalid_format"
        assert "'.'" in result.issues[0].suggested_fix

    @pytest.mark.parametrize("amount, expected", [
        ("1,200.00", Decimal("1200.00")),
        ("12,345", Decimal("12345")),
        ("1,000,000.5", Decimal("1000000.5")),
    ])
    def test_thousands_grouping_accepted(self, validator, amount, expected):
        result = validator.validate(RawExpenseInput(
            category="Rent", payee="Landlord", amount=amount, date="2024-06-01",
        ))
        assert result.expense.amount == expected

    def test_missing_fields_reported_together(self, validator):
        result = validator.validate(RawExpenseInput())
        assert result.is_valid is False
        assert result.expense is None
        assert issue_fields(result, "error") == ["category", "payee", "amount"]

    @pytest.mark.parametrize("amount", ["0", "-5", "0.00"])
    def test_non_positive_amount_is_error(self, validator, amount):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount=amount,
        ))
        assert issue_fields(result, "error") == ["amount"]

    def test_non_numeric_amount_is_error(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="seven",
        ))
        assert result.issues[0].issue_type == "invalid_format"

    @pytest.mark.parametrize("text", ["2024-02-30", "15/06/2024", "June 1st"])
    def test_bad_date_is_error(self, validator, text):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="1", date=text,
        ))
        assert issue_fields(result, "error") == ["date"]

    def test_comma_in_payee_is_error(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Smith, John", amount="1",
        ))
        assert issue_fields(result, "error") == ["payee"]
        assert result.issues[0].suggested_fix is not None


class TestSemanticStage:

    def test_future_date_within_tolerance_is_fine(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="1", date="2024-06-22",
        ))
        assert result.issues == []
        assert result.semantic_valid is True

    def test_future_date_beyond_tolerance_warns(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Food", payee="Market", amount="1", date="2024-07-01",
        ))
        assert result.is_valid
        assert issue_fields(result, "warning") == ["date"]
        assert result.semantic_valid is False

    def test_large_amount_warns(self, validator):
        result = validator.validate(RawExpenseInput(
            category="Car", payee="Dealer", amount="25000", date="2024-06-01",
        ))
        assert result.is_valid
        assert result.has_warnings
        assert "$25,000.00" in result.issues[0].message

    def test_semantic_stage_skipped_when_schema_fails(self, validator):
        result = validator.validate(RawExpenseInput(
            category="", payee="Dealer", amount="25000", date="2030-01-01",
        ))
        assert issue_fields(result, "warning") == []
        assert result.schema_valid is False
