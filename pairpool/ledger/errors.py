"""Ledger error classes.

Raised by the in-memory token ledgers. The pair engine converts asset
ledger errors into TransferFailed through the safe transfer wrapper.
"""


class LedgerError(Exception):
    """Base error for token ledger operations."""

    pass


class InsufficientBalance(LedgerError):
    """Holder does not have enough tokens."""

    pass


class InsufficientAllowance(LedgerError):
    """Spender is not approved for the requested amount."""

    pass
