"""Tests for SafeInt safe arithmetic wrapper."""

import pytest

from pairpool.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects non-int types, including bool."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Checked operators."""

    def test_add_and_mul(self):
        assert (S(2) + 3).value == 5
        assert (3 + S(2)).value == 5
        assert (S(4) * S(5)).value == 20
        assert (5 * S(4)).value == 20

    def test_sub_underflow_raises(self):
        """Negative differences are rejected instead of wrapping."""
        assert (S(10) - 3).value == 7
        with pytest.raises(Underflow):
            S(3) - 10
        with pytest.raises(Underflow):
            3 - S(10)

    def test_floordiv(self):
        assert (S(10) // 3).value == 3
        assert (10 // S(3)).value == 3

    def test_division_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // 0
        with pytest.raises(DivisionByZero):
            10 // S(0)

    def test_errors_are_arithmetic_errors(self):
        """All SafeInt errors share one base, itself an ArithmeticError."""
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(DivisionByZero, SafeIntError)
        assert issubclass(SafeIntError, ArithmeticError)

    def test_comparisons_with_int(self):
        assert S(5) > 4
        assert S(5) >= 5
        assert S(5) < 6
        assert S(5) <= 5
        assert S(5) == 5
        assert S(5) == S(5)


class TestSafeIntNamedOperations:
    """min, isqrt, wrapping arithmetic and width checks."""

    def test_min(self):
        assert S(3).min(7) == 3
        assert S(9).min(S(7)) == 7

    def test_isqrt_floors(self):
        assert S(4_000_000_000_000).isqrt() == 2_000_000
        assert S(2_000_000_000_000).isqrt() == 1_414_213
        assert S(0).isqrt() == 0

    def test_isqrt_negative_raises(self):
        with pytest.raises(Underflow):
            S(-1).isqrt()

    def test_wrapping_add(self):
        """Addition wraps silently at the given width."""
        assert S(2**32 - 1).wrapping_add(1, 32) == 0
        assert S(2**256 - 2**112).wrapping_add(2**113, 256) == 2**112

    def test_wrapping_sub(self):
        """Subtraction across zero wraps to the top of the range."""
        assert S(5).wrapping_sub(2**32 - 5, 32) == 10
        assert S(0).wrapping_sub(1, 256) == 2**256 - 1

    def test_fits(self):
        assert S(2**112 - 1).fits(112)
        assert not S(2**112).fits(112)
        assert not S(-1).fits(112)
