"""
Common utility functions shared across the application.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP

CZECH_COUNTRY_CODE = "420"
NO_BREAK_SPACE = "\u00a0"

_NON_DIGITS = re.compile(r"\D+")
_DIGIT_TRIPLETS = re.compile(r"(\d{3})(?=\d)")


def to_number(value) -> float:
    """
    Leniently coerce a stored amount to a float.

    Firestore documents written by different clients hold amounts as numbers
    or numeric strings. Missing, blank and unparseable values count as 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def format_currency_cz0(value) -> str:
    """
    Format an amount as whole units using Czech digit grouping.

    Args:
        value: The amount to format (number, numeric string or None)

    Returns:
        str: e.g. ``1 234 568`` (no-break spaces) for 1234567.5
    """
    rounded = int(Decimal(str(to_number(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"{rounded:,}".replace(",", NO_BREAK_SPACE)


def _group_digits(digits: str) -> str:
    return _DIGIT_TRIPLETS.sub(r"\1 ", digits).strip()


def format_phone(raw="") -> str:
    """
    Normalize a phone number for display.

    Non-digits are stripped and the digits are grouped in threes from the left.
    Numbers carrying the Czech calling code (at least 12 digits) get a ``+420`` prefix.

    Args:
        raw: Phone number as entered by the user

    Returns:
        str: e.g. ``+420 123 456 789``; empty string for empty input
    """
    digits = _NON_DIGITS.sub("", str(raw or ""))
    if not digits:
        return ""
    if digits.startswith(CZECH_COUNTRY_CODE) and len(digits) >= 12:
        return f"+{CZECH_COUNTRY_CODE} " + _group_digits(digits[len(CZECH_COUNTRY_CODE):])
    return _group_digits(digits)
