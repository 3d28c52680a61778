"""Claim-token ledger for pair liquidity.

Tracks balances, allowances and total supply of the pair's liquidity token.
Only the pair engine mints and burns; holders move tokens with transfer /
transfer_from.
"""

from __future__ import annotations

from pairpool.constants import CLAIM_TOKEN_DECIMALS, CLAIM_TOKEN_NAME, CLAIM_TOKEN_SYMBOL
from pairpool.ledger.base import BalanceLedger


class ClaimTokenLedger(BalanceLedger):
    """In-memory claim-token ledger ("Uniswap V2" / "UNI-V2", 18 decimals)."""

    name = CLAIM_TOKEN_NAME
    symbol = CLAIM_TOKEN_SYMBOL
    decimals = CLAIM_TOKEN_DECIMALS

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move tokens from sender to to.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move owner's tokens on behalf of spender.

        Raises:
            InsufficientAllowance: If spender's allowance is below amount
            InsufficientBalance: If owner holds less than amount
        """
        self._spend_allowance(spender, owner, amount)
        self._move(owner, to, amount)
        return True
