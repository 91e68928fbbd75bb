"""
Line Codec

Maps one Expense to one line of the backing file and back.

FORMAT:
    YYYY-MM-DD,category,payee,amount

- No header row, no quoting, no escaping.
- Amount is a plain fixed-point decimal (no separators, no symbol).

KNOWN LIMITATION: category and payee cannot contain commas or line
breaks. Rather than silently writing a line that would decode into a
different record, encode() refuses such records with a FormatError.

This module is pure: no I/O, no logging.
"""

import datetime as dt
import re
from decimal import Decimal
from typing import Optional

from expense_tracker.models.expense import Expense, ValidationError


DELIMITER = ","

# Column order of a persisted line
FIELD_ORDER = [
    "date",
    "category",
    "payee",
    "amount",
]

_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_AMOUNT_PATTERN = re.compile(r"^[+-]?[0-9]+(\.[0-9]+)?$")
_FORBIDDEN_IN_TEXT = (DELIMITER, "\n", "\r")


class FormatError(ValueError):
    """A line does not decode to an Expense, or an Expense cannot be encoded."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


def format_amount(amount: Decimal) -> str:
    """Render an amount in fixed-point notation, never exponent form."""
    return format(amount, "f")


def parse_date(text: str) -> dt.date:
    """
    Parse a strict YYYY-MM-DD date.

    Raises:
        ValueError: if the text is not in that exact shape or is not
            a real calendar day.
    """
    if not _DATE_PATTERN.match(text):
        raise ValueError(f"Date must be YYYY-MM-DD, got {text!r}")
    return dt.date.fromisoformat(text)


def parse_amount(text: str) -> Decimal:
    """
    Parse a plain decimal amount: ASCII digits, an optional sign and an
    optional fractional part. No separators, exponents or symbols.

    Positivity is left to the Expense model.

    Raises:
        ValueError: if the text is not a plain decimal number.
    """
    if not _AMOUNT_PATTERN.fullmatch(text):
        raise ValueError(f"Amount is not a decimal number: {text!r}")
    return Decimal(text)


def contains_forbidden_text(value: str) -> bool:
    """True if the value would break the one-line, comma-delimited format."""
    return any(ch in value for ch in _FORBIDDEN_IN_TEXT)


class LineCodec:
    """
    Bidirectional mapping between an Expense and one text line.

    GUARANTEES:
    - encode() is deterministic
    - decode(encode(x)) == x for every encodable x
    """

    def encode(self, expense: Expense) -> str:
        """
        Encode an expense as `date,category,payee,amount` (no newline).

        Raises:
            FormatError: if category or payee contains a comma or line break.
        """
        for field in ("category", "payee"):
            value = getattr(expense, field)
            if contains_forbidden_text(value):
                raise FormatError(
                    f"{field} {value!r} contains a comma or line break and "
                    "cannot be stored in the comma-delimited file"
                )

        return DELIMITER.join([
            expense.date.isoformat(),
            expense.category,
            expense.payee,
            format_amount(expense.amount),
        ])

    def decode(self, line: str) -> Expense:
        """
        Decode one line into an Expense.

        Raises:
            FormatError: wrong field count, bad date, bad amount, or a
                blank category/payee.
        """
        parts = line.rstrip("\r\n").split(DELIMITER, len(FIELD_ORDER) - 1)
        if len(parts) != len(FIELD_ORDER):
            raise FormatError(
                f"Expected {len(FIELD_ORDER)} comma-separated fields "
                f"({', '.join(FIELD_ORDER)}), found {len(parts)}"
            )

        date_text, category, payee, amount_text = (part.strip() for part in parts)

        try:
            expense_date = parse_date(date_text)
        except ValueError as e:
            raise FormatError(f"Invalid date: {e}") from e

        try:
            amount = parse_amount(amount_text)
        except ValueError as e:
            raise FormatError(str(e)) from e

        try:
            return Expense.create(
                category=category,
                payee=payee,
                amount=amount,
                date=expense_date,
            )
        except ValidationError as e:
            raise FormatError(str(e)) from e
