"""Liquidity provisioning math.

For first deposit (total_supply == 0):
    liquidity = floor(sqrt(amount_a * amount_b)) - MINIMUM_LIQUIDITY

For subsequent deposits:
    liquidity = min(amount_a * supply // reserve_a, amount_b * supply // reserve_b)

Taking the lesser ratio means an imbalanced deposit donates its excess to
existing holders instead of diluting them.
"""

from __future__ import annotations

from pairpool.config import DEFAULT_PAIR_CONFIG, PairConfig
from pairpool.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
)
from pairpool.safe_int import S


def quote(amount_x: int, reserve_x: int, reserve_y: int) -> int:
    """Amount of Y worth `amount_x` of X at the current reserve ratio.

    Raises:
        InsufficientInputAmount: If amount_x is zero
        InsufficientLiquidity: If either reserve is empty
    """
    if amount_x <= 0:
        raise InsufficientInputAmount(f"amount must be positive: {amount_x}")
    if reserve_x <= 0 or reserve_y <= 0:
        raise InsufficientLiquidity(f"empty reserves: ({reserve_x}, {reserve_y})")
    return (S(amount_x) * S(reserve_y) // S(reserve_x)).value


def optimal_deposit(
    amount_a_desired: int,
    amount_b_desired: int,
    amount_a_min: int,
    amount_b_min: int,
    reserve_a: int,
    reserve_b: int,
) -> tuple[int, int]:
    """Choose deposit amounts matching the pool ratio within the caller's bounds.

    An empty pool takes the desired amounts as-is and sets the initial price.

    Returns:
        (amount_a, amount_b) to pull from the depositor

    Raises:
        InsufficientInputAmount: If neither pairing satisfies its minimum
    """
    if reserve_a == 0 and reserve_b == 0:
        return amount_a_desired, amount_b_desired

    amount_b_optimal = quote(amount_a_desired, reserve_a, reserve_b)
    if amount_b_optimal <= amount_b_desired:
        if amount_b_optimal < amount_b_min:
            raise InsufficientInputAmount(
                f"B amount {amount_b_optimal} below minimum {amount_b_min}"
            )
        return amount_a_desired, amount_b_optimal

    amount_a_optimal = quote(amount_b_desired, reserve_b, reserve_a)
    # implied by amount_b_optimal > amount_b_desired
    if amount_a_optimal > amount_a_desired:
        raise InsufficientInputAmount(
            f"A amount {amount_a_optimal} exceeds desired {amount_a_desired}"
        )
    if amount_a_optimal < amount_a_min:
        raise InsufficientInputAmount(f"A amount {amount_a_optimal} below minimum {amount_a_min}")
    return amount_a_optimal, amount_b_desired


def liquidity_to_mint(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_supply: int,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> int:
    """Claim tokens owed for a deposit of (amount_a, amount_b).

    Does not include the MINIMUM_LIQUIDITY lock; the caller mints that
    separately on the first deposit.

    Raises:
        InsufficientLiquidityMinted: If the result is not positive
    """
    if total_supply == 0:
        root = S(amount_a) * S(amount_b)
        root = root.isqrt()
        if root <= config.minimum_liquidity:
            raise InsufficientLiquidityMinted(
                f"initial sqrt(k) {root.value} does not exceed locked {config.minimum_liquidity}"
            )
        liquidity = (root - config.minimum_liquidity).value
    else:
        liquidity = (
            (S(amount_a) * S(total_supply) // S(reserve_a))
            .min(S(amount_b) * S(total_supply) // S(reserve_b))
            .value
        )

    if liquidity <= 0:
        raise InsufficientLiquidityMinted(f"deposit ({amount_a}, {amount_b}) mints nothing")
    return liquidity


def amounts_for_burn(
    liquidity: int,
    balance_a: int,
    balance_b: int,
    total_supply: int,
) -> tuple[int, int]:
    """Pro-rata share of both balances for `liquidity` claim tokens.

    Raises:
        InsufficientLiquidityBurned: If the supply is empty or a share rounds to zero
    """
    if liquidity <= 0 or total_supply <= 0:
        raise InsufficientLiquidityBurned(f"burning {liquidity} of supply {total_supply}")
    amount_a = (S(liquidity) * S(balance_a) // S(total_supply)).value
    amount_b = (S(liquidity) * S(balance_b) // S(total_supply)).value
    if amount_a <= 0 or amount_b <= 0:
        raise InsufficientLiquidityBurned(
            f"burning {liquidity} of {total_supply} pays ({amount_a}, {amount_b})"
        )
    return amount_a, amount_b
