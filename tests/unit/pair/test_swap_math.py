"""Tests for constant-product swap math."""

import pytest

from pairpool.config import PairConfig
from pairpool.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    KInvariant,
)
from pairpool.pair.swap_math import (
    adjusted_balance,
    amount_received,
    check_k,
    get_amount_in,
    get_amount_out,
)


class TestGetAmountOut:
    def test_reference_swap(self):
        """1000 in against (1_000_000, 2_000_000) pays floor of the 997/1000 formula."""
        expected = 1000 * 997 * 2_000_000 // (1_000_000 * 1000 + 1000 * 997)
        assert get_amount_out(1000, 1_000_000, 2_000_000) == expected == 1992

    def test_zero_input_raises(self):
        with pytest.raises(InsufficientInputAmount):
            get_amount_out(0, 1_000, 1_000)

    def test_empty_reserves_raise(self):
        with pytest.raises(InsufficientLiquidity):
            get_amount_out(10, 0, 1_000)
        with pytest.raises(InsufficientLiquidity):
            get_amount_out(10, 1_000, 0)

    def test_never_drains_reserve(self):
        assert get_amount_out(10**30, 1_000, 1_000) < 1_000

    def test_custom_fee(self):
        """Zero-fee config reduces to the plain x*y=k formula."""
        no_fee = PairConfig(fee_numerator=0)
        assert get_amount_out(1_000, 1_000, 1_000, no_fee) == 500


class TestGetAmountIn:
    def test_rounds_up(self):
        amount_in = get_amount_in(1992, 1_000_000, 2_000_000)
        assert get_amount_out(amount_in, 1_000_000, 2_000_000) >= 1992
        assert get_amount_out(amount_in - 2, 1_000_000, 2_000_000) < 1992

    def test_zero_output_raises(self):
        with pytest.raises(InsufficientOutputAmount):
            get_amount_in(0, 1_000, 1_000)

    def test_output_at_reserve_raises(self):
        with pytest.raises(InsufficientLiquidity):
            get_amount_in(1_000, 1_000, 1_000)


class TestAmountReceived:
    def test_input_side(self):
        assert amount_received(1_100, 1_000, 0) == 100

    def test_output_side(self):
        assert amount_received(900, 1_000, 100) == 0

    def test_both_sides(self):
        """A side can pay out and receive in the same swap."""
        assert amount_received(950, 1_000, 100) == 50


class TestCheckK:
    def test_fee_covered(self):
        assert adjusted_balance(1_100, 100) == 1_100 * 1000 - 300
        check_k(1_100, 910, 100, 0, 1_000, 1_000)

    def test_product_decrease_raises(self):
        with pytest.raises(KInvariant):
            check_k(1_100, 900, 100, 0, 1_000, 1_000)

    def test_fee_not_paid_raises(self):
        """A swap that keeps raw k but skips the fee is rejected."""
        with pytest.raises(KInvariant):
            check_k(2_000, 500, 1_000, 0, 1_000, 1_000)
