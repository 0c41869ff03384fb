"""
Numeric utilities for model-layer conversions.

This module provides the same to_decimal() and to_share() functions as
calculator.decimal_math, but lives in models/ to avoid circular imports
(models -> calculator -> models).

Uses only stdlib 'decimal' and 'fractions' - no dependencies on calculator package.
"""

from decimal import Decimal
from fractions import Fraction
from typing import Union

Numeric = Union[int, float, str, Decimal, Fraction]

# Statutory shares never need a denominator anywhere near this large.
SHARE_MAX_DENOMINATOR = 1_000_000


def to_decimal(value: Numeric) -> Decimal:
    """Convert a numeric value to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_share(value: Numeric) -> Fraction:
    """
    Convert an inheritance share to an exact Fraction.

    Floats and decimal strings are snapped to the nearest rational with a
    bounded denominator, so 0.6666666666666666 comes back as 2/3.
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, str):
        value = value.strip()
        if "/" in value:
            return Fraction(value)
        return Fraction(Decimal(value)).limit_denominator(SHARE_MAX_DENOMINATOR)
    return Fraction(to_decimal(value)).limit_denominator(SHARE_MAX_DENOMINATOR)
