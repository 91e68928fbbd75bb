"""Line codec package."""

from expense_tracker.codec.line_codec import (
    DELIMITER,
    FIELD_ORDER,
    FormatError,
    LineCodec,
    contains_forbidden_text,
    format_amount,
    parse_amount,
    parse_date,
)

__all__ = [
    "DELIMITER",
    "FIELD_ORDER",
    "FormatError",
    "LineCodec",
    "contains_forbidden_text",
    "format_amount",
    "parse_amount",
    "parse_date",
]
