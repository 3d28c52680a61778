"""Flash loans.

A borrower receives up to the full reserve of one asset, gets called back
synchronously while the pair is locked, and must have returned the amount
plus a 0.3% fee by the time the callback returns. The lending steps run
inside the pair's transaction, so a failed repayment also undoes the loan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pairpool.constants import CALLBACK_SUCCESS
from pairpool.errors import (
    CallbackFailed,
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidity,
    RepaymentFailed,
)
from pairpool.interfaces import FlashBorrower
from pairpool.safe_int import S
from pairpool.transfer import safe_transfer

if TYPE_CHECKING:
    from pairpool.pair.engine import PairEngine

logger = structlog.get_logger()


class FlashLoanCoordinator:
    """Lending side of a pair: loan limits, fees and the repayment protocol."""

    def __init__(self, pair: PairEngine) -> None:
        self._pair = pair

    def max_loanable(self, asset: str) -> int:
        """Largest loan available in `asset`; 0 if the pair does not hold it."""
        if self._pair.token_for(asset) is None:
            return 0
        reserve_a, reserve_b, _ = self._pair.get_reserves()
        return reserve_a if self._pair.is_token_a(asset) else reserve_b

    def loan_fee(self, asset: str, amount: int) -> int:
        """Fee owed on a loan of `amount`.

        Raises:
            Forbidden: If the pair does not hold `asset`
        """
        if self._pair.token_for(asset) is None:
            raise Forbidden(f"unsupported flash loan asset: {asset}")
        config = self._pair.config
        return (S(amount) * S(config.fee_numerator) // S(config.fee_denominator)).value

    def execute(
        self,
        initiator: str,
        borrower: FlashBorrower,
        asset: str,
        amount: int,
        data: bytes,
    ) -> int:
        """Lend, call back, and verify repayment. Must run under the pair lock.

        Returns:
            The fee that was charged

        Raises:
            Forbidden: If the pair does not hold `asset`
            InsufficientInputAmount: If amount is zero
            InsufficientLiquidity: If amount exceeds the reserve
            CallbackFailed: If the borrower returned the wrong acknowledgment
            RepaymentFailed: If the balance did not grow back by amount + fee
        """
        token = self._pair.token_for(asset)
        if token is None:
            raise Forbidden(f"unsupported flash loan asset: {asset}")
        if amount <= 0:
            raise InsufficientInputAmount(f"flash loan amount must be positive: {amount}")
        available = self.max_loanable(asset)
        if amount > available:
            raise InsufficientLiquidity(f"flash loan {amount} exceeds reserve {available}")

        fee = self.loan_fee(asset, amount)
        pair_address = self._pair.address
        balance_before = token.balance_of(pair_address)

        safe_transfer(token, pair_address, borrower.address, amount)
        logger.debug(
            "flash_loan_sent",
            borrower=borrower.address,
            asset=token.address,
            amount=amount,
            fee=fee,
        )

        acknowledgment = borrower.on_flash_loan(initiator, token.address, amount, fee, data)
        if acknowledgment != CALLBACK_SUCCESS:
            raise CallbackFailed(f"borrower {borrower.address} returned wrong acknowledgment")

        balance_after = token.balance_of(pair_address)
        if balance_after < balance_before + fee:
            raise RepaymentFailed(
                f"balance {balance_after} below required {balance_before + fee}"
            )
        return fee
