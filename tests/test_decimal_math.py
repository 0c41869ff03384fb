"""
Tests for Decimal Math Utilities.

Deterministic Calculation - Verify same inputs always produce same outputs.

Tests verify:
1. Exact fractions eliminate floating point errors in statutory shares
2. Yen rounding follows the named rounding method
3. Share parsing snaps floats back to the intended fraction
"""

import pytest
from decimal import Decimal, InvalidOperation
from fractions import Fraction


class TestConversion:
    """Tests for value conversion to Decimal and Fraction."""

    def test_to_decimal_from_float(self):
        """Floats convert through their shortest string representation."""
        from calculator.decimal_math import to_decimal
        assert to_decimal(33.33) == Decimal("33.33")

    def test_to_decimal_from_fraction(self):
        from calculator.decimal_math import to_decimal
        assert to_decimal(Fraction(1, 4)) == Decimal("0.25")

    def test_to_fraction_is_exact(self):
        from calculator.decimal_math import to_fraction
        assert to_fraction(33.33) == Fraction(3333, 100)
        assert to_fraction("2/6") == Fraction(1, 3)

    @pytest.mark.parametrize("value,expected", [
        (Fraction(1, 6), Fraction(1, 6)),
        (1, Fraction(1)),
        ("1/3", Fraction(1, 3)),
        (" 3/4 ", Fraction(3, 4)),
        ("0.25", Fraction(1, 4)),
        (0.3333333333333333, Fraction(1, 3)),
        (0.16666666666666666, Fraction(1, 6)),
        (Decimal("0.5"), Fraction(1, 2)),
    ])
    def test_to_share(self, value, expected):
        from calculator.decimal_math import to_share
        assert to_share(value) == expected


class TestYenRounding:
    """Tests for rounding to whole yen."""

    def test_half_up(self):
        from calculator.decimal_math import yen
        assert yen(Fraction(5, 2)) == 3
        assert yen(Fraction(-5, 2)) == -3
        assert yen(Decimal("1234.5")) == 1235
        assert yen(1234.4) == 1234

    def test_floor(self):
        from calculator.decimal_math import yen_floor
        assert yen_floor(Fraction(52_000_000, 3)) == 17_333_333
        assert yen_floor(Fraction(-1, 2)) == -1

    def test_truncate_toward_zero(self):
        from calculator.decimal_math import yen_truncate
        assert yen_truncate(Fraction(7, 2)) == 3
        assert yen_truncate(Fraction(-7, 2)) == -3
        assert yen_truncate(Decimal("-3.9")) == -3

    @pytest.mark.parametrize("method,expected", [
        ("round", 11),
        ("floor", 10),
        ("ceil", 11),
    ])
    def test_round_yen(self, method, expected):
        from calculator.decimal_math import round_yen
        assert round_yen(Decimal("10.5"), method) == expected

    def test_unknown_rounding_method(self):
        from calculator.decimal_math import round_yen
        with pytest.raises(ValueError):
            round_yen(Decimal("10.5"), "banker")

    def test_deterministic(self):
        """Same input always gives same output."""
        from calculator.decimal_math import yen
        results = {yen(Fraction(100_000_000, 3)) for _ in range(100)}
        assert results == {33_333_333}


class TestDivide:

    def test_exact_quotient(self):
        from calculator.decimal_math import divide
        assert divide(1, 3) == Fraction(1, 3)

    def test_zero_with_default(self):
        from calculator.decimal_math import divide
        assert divide(5, 0, default=0) == 0

    def test_zero_without_default(self):
        from calculator.decimal_math import divide
        with pytest.raises(InvalidOperation):
            divide(5, 0)


class TestFormatting:

    @pytest.mark.parametrize("value,expected", [
        (Fraction(1, 4), "1/4"),
        (Fraction(1, 16), "1/16"),
        (0.6666666666666666, "2/3"),
        (Fraction(1), "1"),
        (0, "0"),
    ])
    def test_format_fraction(self, value, expected):
        from calculator.decimal_math import format_fraction
        assert format_fraction(value) == expected
