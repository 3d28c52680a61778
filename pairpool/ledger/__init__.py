"""In-memory token ledgers used as pair collaborators."""

from pairpool.ledger.asset import (
    AbiReturnToken,
    Erc20Token,
    FeeOnTransferToken,
    NoReturnToken,
)
from pairpool.ledger.base import MAX_ALLOWANCE, BalanceLedger
from pairpool.ledger.claim_token import ClaimTokenLedger
from pairpool.ledger.errors import InsufficientAllowance, InsufficientBalance, LedgerError

__all__ = [
    "BalanceLedger",
    "MAX_ALLOWANCE",
    "ClaimTokenLedger",
    "Erc20Token",
    "NoReturnToken",
    "AbiReturnToken",
    "FeeOnTransferToken",
    "LedgerError",
    "InsufficientBalance",
    "InsufficientAllowance",
]
