"""Protocol fee checkpoint.

When a fee recipient is configured, 1/6 of the growth in sqrt(k) since the
last checkpoint is paid to it by minting claim tokens before any mint or
burn. Solving

    minted / (supply + minted) = (root_k - root_k_last) / (6 * root_k)

for minted gives supply * (root_k - root_k_last) / (5 * root_k + root_k_last).
"""

from __future__ import annotations

import structlog

from pairpool.config import DEFAULT_PAIR_CONFIG, PairConfig
from pairpool.constants import ZERO_ADDRESS
from pairpool.interfaces import ClaimLedger
from pairpool.models.types import normalize_address
from pairpool.pair.state import PairState
from pairpool.safe_int import S

logger = structlog.get_logger()


def fee_recipient(fee_to: str | None) -> str | None:
    """Normalize a configured recipient; None and the zero address mean off."""
    if not fee_to:
        return None
    fee_to_norm = normalize_address(fee_to)
    if fee_to_norm == ZERO_ADDRESS:
        return None
    return fee_to_norm


def protocol_fee_liquidity(
    total_supply: int,
    k: int,
    k_last: int,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> int:
    """Claim tokens owed to the fee recipient for growth from k_last to k."""
    if k_last == 0:
        return 0
    root_k = S(k).isqrt()
    root_k_last = S(k_last).isqrt()
    if root_k <= root_k_last:
        return 0
    numerator = S(total_supply) * (root_k - root_k_last)
    denominator = root_k * config.protocol_fee_divisor + root_k_last
    return (numerator // denominator).value


def mint_fee(
    state: PairState,
    ledger: ClaimLedger,
    fee_to: str | None,
    config: PairConfig = DEFAULT_PAIR_CONFIG,
) -> bool:
    """Run the checkpoint against the pair's current (pre-operation) reserves.

    Turning the fee off clears k_last. Turning it on takes effect from the
    next k_last write, which the caller performs after its own update.

    Returns:
        True if fee collection is on, so the caller refreshes k_last
    """
    recipient = fee_recipient(fee_to)
    if recipient is None:
        if state.k_last != 0:
            logger.debug("protocol_fee_disabled", k_last=state.k_last)
            state.k_last = 0
        return False

    if state.k_last != 0:
        liquidity = protocol_fee_liquidity(ledger.total_supply(), state.k, state.k_last, config)
        if liquidity > 0:
            ledger.mint(recipient, liquidity)
            logger.debug(
                "protocol_fee_minted",
                fee_to=recipient,
                liquidity=liquidity,
                k=state.k,
                k_last=state.k_last,
            )
    return True
