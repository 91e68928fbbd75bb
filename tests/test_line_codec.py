"""Tests for the line codec."""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.codec import FormatError, LineCodec, format_amount, parse_date
from expense_tracker.models.expense import Expense


@pytest.fixture
def codec():
    return LineCodec()


class TestEncode:

    def test_encode_field_order(self, codec):
        """Test the line is date,category,payee,amount."""
        expense = Expense.create("Food", "Cafe", Decimal("3.50"), date(2024, 1, 5))
        assert codec.encode(expense) == "2024-01-05,Food,Cafe,3.50"

    def test_encode_is_deterministic(self, codec):
        expense = Expense.create("Rent", "Landlord", Decimal("1200.00"), date(2024, 3, 1))
        assert codec.encode(expense) == codec.encode(expense)

    def test_encode_never_uses_exponent_notation(self, codec):
        """Test large and scaled amounts are written in plain digits."""
        expense = Expense.create("Car", "Dealer", Decimal("1E+4"), date(2024, 1, 1))
        assert codec.encode(expense).endswith(",10000")
        assert format_amount(Decimal("1.2E-1")) == "0.12"

    def test_encode_pads_single_digit_month_and_day(self, codec):
        expense = Expense.create("Food", "Cafe", Decimal("1"), date(2024, 2, 3))
        assert codec.encode(expense).startswith("2024-02-03,")

    @pytest.mark.parametrize("payee", ["Smith, John", "Line\nbreak"])
    def test_encode_rejects_unstorable_text(self, codec, payee):
        """Test that a comma or newline in a field is refused, not written."""
        expense = Expense.create("Food", payee, Decimal("1"), date(2024, 1, 1))
        with pytest.raises(FormatError, match="payee"):
            codec.encode(expense)


class TestDecode:

    def test_decode_valid_line(self, codec):
        expense = codec.decode("2024-01-05,Food,Cafe,3.50")
        assert expense.date == date(2024, 1, 5)
        assert expense.category == "Food"
        assert expense.payee == "Cafe"
        assert expense.amount == Decimal("3.50")

    def test_decode_strips_line_ending(self, codec):
        expense = codec.decode("2024-01-05,Food,Cafe,3.50\r\n")
        assert expense.amount == Decimal("3.50")

    def test_decode_ignores_space_around_fields(self, codec):
        expense = codec.decode("2024-01-05, Food , Cafe , 3.50")
        assert expense.category == "Food"
        assert expense.payee == "Cafe"

    @pytest.mark.parametrize("line", [
        "2024-01-05,Food,3.50",
        "2024-01-05",
        "",
    ])
    def test_decode_rejects_too_few_fields(self, codec, line):
        with pytest.raises(FormatError, match="Expected 4"):
            codec.decode(line)

    def test_decode_extra_comma_lands_in_amount(self, codec):
        """Test splitting stops after three commas, so a fifth field breaks the amount."""
        with pytest.raises(FormatError, match="Amount"):
            codec.decode("2024-01-05,Food,Cafe,3.50,extra")

    @pytest.mark.parametrize("date_text", [
        "05/01/2024",
        "2024-1-5",
        "2024-02-30",
        "20240105",
        "yesterday",
    ])
    def test_decode_rejects_bad_dates(self, codec, date_text):
        with pytest.raises(FormatError, match="date"):
            codec.decode(f"{date_text},Food,Cafe,3.50")

    @pytest.mark.parametrize("amount_text", ["abc", "", "NaN", "Infinity", "$3.50"])
    def test_decode_rejects_non_numeric_amounts(self, codec, amount_text):
        with pytest.raises(FormatError):
            codec.decode(f"2024-01-05,Food,Cafe,{amount_text}")

    @pytest.mark.parametrize("amount_text", ["1_000", "1e3", "\u0663.50", "3.", ".5", "1,000"])
    def test_decode_rejects_amounts_that_are_not_plain_decimals(self, codec, amount_text):
        with pytest.raises(FormatError, match="not a decimal number"):
            codec.decode(f"2024-01-05,Food,Cafe,{amount_text}")

    @pytest.mark.parametrize("amount_text", ["0", "-5", "0.00"])
    def test_decode_rejects_non_positive_amounts(self, codec, amount_text):
        with pytest.raises(FormatError):
            codec.decode(f"2024-01-05,Food,Cafe,{amount_text}")

    def test_decode_rejects_blank_payee(self, codec):
        with pytest.raises(FormatError):
            codec.decode("2024-01-05,Food,  ,3.50")

    def test_format_error_reports_line_number(self):
        error = FormatError("bad amount", line_number=7)
        assert str(error) == "line 7: bad amount"


class TestRoundTrip:

    @pytest.mark.parametrize("expense", [
        Expense.create("Food", "Market", Decimal("7.13"), date(2024, 3, 1)),
        Expense.create("Rent", "Landlord", Decimal("1200.00"), date(2024, 3, 1)),
        Expense.create("Gifts", "Ünïcödé Shop", Decimal("0.01"), date(1999, 12, 31)),
        Expense.create("Tax", "Revenue Office", Decimal("98765432109876.55"), date(2024, 2, 29)),
    ])
    def test_decode_inverts_encode(self, expense):
        codec = LineCodec()
        assert codec.decode(codec.encode(expense)) == expense


class TestParseDate:

    def test_parse_date_accepts_iso(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_parse_date_rejects_non_leap_day(self):
        with pytest.raises(ValueError):
            parse_date("2023-02-29")
