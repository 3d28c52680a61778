"""Constant-product swap math.

Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

The 997/1000 factor charges the 0.3% fee on the input side. The swap is
accepted only if the fee-adjusted reserve product does not decrease
(check_k), which also protects against any transfer sequence the output
formula does not account for.
"""

from __future__ import annotations

from pairpool.config import DEFAULT_PAIR_CONFIG, PairConfig
from pairpool.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    KInvariant,
)
from pairpool.safe_int import S


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> int:
    """Calculate output amount for an exact input.

    Formula: amount_out = (in * fee * res_out) / (res_in * denom + in * fee)

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        config: Fee parameters (default 997/1000)

    Returns:
        Output token amount (floor)

    Raises:
        InsufficientInputAmount: If amount_in is zero
        InsufficientLiquidity: If either reserve is empty
    """
    if amount_in <= 0:
        raise InsufficientInputAmount(f"amount_in must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity(f"empty reserves: ({reserve_in}, {reserve_out})")

    amount_in_with_fee = S(amount_in) * S(config.fee_multiplier)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(config.fee_denominator) + amount_in_with_fee

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> int:
    """Calculate required input for a desired output.

    Formula: amount_in = (res_in * out * denom) / ((res_out - out) * fee) + 1

    Raises:
        InsufficientOutputAmount: If amount_out is zero
        InsufficientLiquidity: If reserves are empty or amount_out >= reserve_out
    """
    if amount_out <= 0:
        raise InsufficientOutputAmount(f"amount_out must be positive: {amount_out}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity(f"empty reserves: ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(f"amount_out {amount_out} >= reserve_out {reserve_out}")

    numerator = S(reserve_in) * S(amount_out) * S(config.fee_denominator)
    denominator = (S(reserve_out) - S(amount_out)) * S(config.fee_multiplier)

    return ((numerator // denominator) + S(1)).value


def amount_received(balance: int, reserve: int, amount_out: int) -> int:
    """Input that arrived on one side during a swap.

    Whatever the balance holds beyond `reserve - amount_out` was sent in.
    """
    floor = reserve - amount_out
    return balance - floor if balance > floor else 0


def adjusted_balance(
    balance: int, amount_in: int, config: PairConfig = DEFAULT_PAIR_CONFIG
) -> int:
    """Balance scaled by the fee denominator, minus the fee on that side's input."""
    return (S(balance) * S(config.fee_denominator) - S(amount_in) * S(config.fee_numerator)).value


def check_k(
    balance_a: int,
    balance_b: int,
    amount_a_in: int,
    amount_b_in: int,
    reserve_a: int,
    reserve_b: int,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> None:
    """Require the fee-adjusted post-swap product to cover the pre-swap product.

    Raises:
        KInvariant: If adjusted_a * adjusted_b < reserve_a * reserve_b * denom**2
    """
    adjusted_a = adjusted_balance(balance_a, amount_a_in, config)
    adjusted_b = adjusted_balance(balance_b, amount_b_in, config)
    denominator = S(config.fee_denominator)
    required = S(reserve_a) * S(reserve_b) * denominator * denominator
    if S(adjusted_a) * S(adjusted_b) < required:
        raise KInvariant(
            f"adjusted product {adjusted_a * adjusted_b} < required {required.value}"
        )
