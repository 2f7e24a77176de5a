"""
Currency and Aggregation Utilities

DESIGN DECISION: Money is always Decimal, rounded half-up to cents.
Floats are converted through their string form so that 0.1 stays 0.1
instead of 0.1000000000000000055511151231257827.

Aggregates never raise on empty input; they degrade to zero.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

Numeric = Union[Decimal, int, float, str]

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def _to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_to_cents(amount: Numeric) -> Decimal:
    """Round to the nearest cent, halves away from zero."""
    return _to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def is_valid_amount(amount: Numeric) -> bool:
    """A valid amount is a finite, non-negative number."""
    try:
        value = _to_decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        return False
    return value.is_finite() and value >= 0


def parse_currency(text: str) -> Decimal:
    """
    Parse a user-entered currency string such as '$1,234.50'.

    Currency symbols, separators and spaces are stripped.
    Returns 0 if nothing numeric remains.
    """
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return ZERO


def to_valid_amount(value: Numeric) -> Decimal:
    """
    Convert user input to a valid money amount.

    Invalid, negative or non-finite input yields 0.00.
    """
    if isinstance(value, str):
        candidate = parse_currency(value)
    else:
        try:
            candidate = _to_decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            return ZERO

    if not is_valid_amount(candidate):
        return ZERO
    return round_to_cents(candidate)


def calculate_total(amounts: Iterable[Numeric]) -> Decimal:
    """Sum of amounts (0.00 for an empty sequence)."""
    return sum((_to_decimal(a) for a in amounts), ZERO)


def calculate_average(amounts: Iterable[Numeric]) -> Decimal:
    """Arithmetic mean rounded to cents (0.00 for an empty sequence)."""
    values = [_to_decimal(a) for a in amounts]
    if not values:
        return ZERO
    return round_to_cents(calculate_total(values) / len(values))


def calculate_percentage(amount: Numeric, total: Numeric) -> int:
    """
    Percentage of total, rounded to the nearest whole percent.

    A zero total yields 0 rather than raising.
    """
    total_dec = _to_decimal(total)
    if total_dec == 0:
        return 0
    ratio = _to_decimal(amount) / total_dec * HUNDRED
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage_change(current: Numeric, previous: Numeric) -> Decimal:
    """
    Relative change from previous to current, rounded half-up to the
    nearest whole percent.

    A zero previous value yields 0.
    """
    previous_dec = _to_decimal(previous)
    if previous_dec == 0:
        return Decimal("0")
    change = _to_decimal(current) - previous_dec
    return (change / previous_dec * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
