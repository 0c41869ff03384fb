"""
Decimal Math Utilities for Inheritance Tax Calculations.

Provides exact arithmetic for yen amounts and statutory shares. Shares such
as 1/3 or 1/6 cannot be represented in binary floating point, so every
intermediate value is kept as a Fraction (or a Decimal for user-entered
percentages) and rounded to whole yen only where a rule says so.

Deterministic Calculation - Same inputs always produce same outputs.

Why exact arithmetic?
- Float: 52_000_000 * (1/3) = 17333333.333333332
- Fraction: 52_000_000 * Fraction(1, 3) = Fraction(52000000, 3)

This matters for:
- Bracket boundaries where an heir's share lands exactly on 10,000,000 yen
- Summing per-heir amounts that must add back to the estate total
- Audit trails where a 1 yen discrepancy can flag a return
"""

import math
from decimal import Decimal, ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, InvalidOperation
from fractions import Fraction
from typing import Optional, Union
import logging

from models._decimal_utils import SHARE_MAX_DENOMINATOR, to_share
from models.inheritance import RoundingMethod

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to Decimal / Fraction
Numeric = Union[int, float, str, Decimal, Fraction]

YEN_PLACES = Decimal("1")  # Round to whole yen

ZERO = Fraction(0)
HUNDRED = Decimal("100")

_ROUNDING_MODES = {
    RoundingMethod.ROUND: ROUND_HALF_UP,
    RoundingMethod.FLOOR: ROUND_FLOOR,
    RoundingMethod.CEIL: ROUND_CEILING,
}

__all__ = [
    "Numeric",
    "SHARE_MAX_DENOMINATOR",
    "ZERO",
    "HUNDRED",
    "to_decimal",
    "to_fraction",
    "to_share",
    "yen",
    "yen_floor",
    "yen_truncate",
    "round_yen",
    "rounding_mode_for",
    "divide",
    "format_fraction",
]


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Args:
        value: Value to convert (int, float, str, Decimal or Fraction)

    Returns:
        Decimal representation

    Examples:
        >>> to_decimal(100)
        Decimal('100')
        >>> to_decimal(33.33)
        Decimal('33.33')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    if isinstance(value, float):
        # Convert float to string first to preserve representation
        return Decimal(str(value))
    return Decimal(value)


def to_fraction(value: Numeric) -> Fraction:
    """
    Convert a numeric value to an exact Fraction.

    Unlike to_share(), no denominator limit is applied: 33.33 becomes
    3333/100, not a nearby rational.
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, str) and "/" in value:
        return Fraction(value.strip())
    return Fraction(to_decimal(value))


def _quantize(value: Numeric, rounding: str) -> int:
    if isinstance(value, Fraction):
        if rounding == ROUND_HALF_UP:
            magnitude = math.floor(abs(value) + Fraction(1, 2))
            return magnitude if value >= 0 else -magnitude
        if rounding == ROUND_FLOOR:
            return math.floor(value)
        if rounding == ROUND_CEILING:
            return math.ceil(value)
        return math.trunc(value)
    return int(to_decimal(value).quantize(YEN_PLACES, rounding=rounding))


def yen(value: Numeric) -> int:
    """
    Round value to whole yen using ROUND_HALF_UP.

    Examples:
        >>> yen(Fraction(5, 2))
        3
        >>> yen(1234.4)
        1234
    """
    return _quantize(value, ROUND_HALF_UP)


def yen_floor(value: Numeric) -> int:
    """Round value down to whole yen (toward negative infinity)."""
    return _quantize(value, ROUND_FLOOR)


def yen_truncate(value: Numeric) -> int:
    """
    Truncate value to whole yen (toward zero).

    Used for the bracket table, where fractions of a yen are discarded.
    """
    return _quantize(value, ROUND_DOWN)


def rounding_mode_for(method: Union[RoundingMethod, str]) -> str:
    """
    Map a RoundingMethod to the decimal module rounding constant.

    Raises:
        ValueError: If the method is not one of round, floor, ceil
    """
    return _ROUNDING_MODES[RoundingMethod(method)]


def round_yen(value: Numeric, method: Union[RoundingMethod, str] = RoundingMethod.ROUND) -> int:
    """
    Round value to whole yen using the named rounding method.

    Examples:
        >>> round_yen(Decimal("10.5"), "floor")
        10
        >>> round_yen(Decimal("10.5"), "ceil")
        11
    """
    return _quantize(value, rounding_mode_for(method))


def divide(a: Numeric, b: Numeric, default: Optional[Numeric] = None) -> Fraction:
    """
    Divide a by b exactly.

    Args:
        a: Dividend
        b: Divisor
        default: Value to return if division by zero (None raises error)

    Returns:
        Quotient as Fraction

    Raises:
        InvalidOperation: If b is zero and no default provided
    """
    b_frac = to_fraction(b)
    if b_frac == 0:
        if default is not None:
            return to_fraction(default)
        raise InvalidOperation("Division by zero")
    return to_fraction(a) / b_frac


def format_fraction(value: Numeric, tolerance: Numeric = Fraction(1, 1_000_000)) -> str:
    """
    Render a share as a reduced fraction string for display.

    Walks the continued-fraction expansion of value and stops at the first
    convergent within the relative tolerance, so a float such as
    0.6666666666666666 renders as "2/3". Display only; never feed the
    result back into arithmetic.

    Examples:
        >>> format_fraction(Fraction(1, 4))
        '1/4'
        >>> format_fraction(0.6666666666666666)
        '2/3'
        >>> format_fraction(1)
        '1'
    """
    target = to_fraction(value)
    if target.denominator == 1:
        return str(target.numerator)

    limit = abs(target) * to_fraction(tolerance)
    remainder = target
    h_prev, h_curr = 0, 1
    k_prev, k_curr = 1, 0
    approx = ZERO

    # Convergents of a rational expansion terminate; the bound is a guard.
    for _ in range(64):
        term = math.floor(remainder)
        h_prev, h_curr = h_curr, term * h_curr + h_prev
        k_prev, k_curr = k_curr, term * k_curr + k_prev
        approx = Fraction(h_curr, k_curr)
        if abs(approx - target) <= limit:
            break
        remainder -= term
        if remainder == 0:
            break
        remainder = 1 / remainder

    if approx.denominator == 1:
        return str(approx.numerator)
    return f"{approx.numerator}/{approx.denominator}"
