"""Pair error classes.

Every error aborts the whole operation that raised it. Nothing is retried
inside the engine.
"""


class PairError(Exception):
    """Base error for pair operations."""

    pass


class Forbidden(PairError):
    """Caller is not authorized, or the asset is not one of the pair's two."""

    pass


class Locked(PairError):
    """A guarded operation was re-entered while the pair lock is held."""

    pass


class InsufficientLiquidityMinted(PairError):
    """Deposit would mint zero claim tokens."""

    pass


class InsufficientLiquidityBurned(PairError):
    """Redemption would pay out zero of either asset."""

    pass


class InsufficientOutputAmount(PairError):
    """Output is zero or below the caller's minimum."""

    pass


class InsufficientInputAmount(PairError):
    """Input is zero, or a deposit cannot satisfy its minimum amounts."""

    pass


class InsufficientLiquidity(PairError):
    """Request exceeds what the reserves can provide."""

    pass


class Overflow(PairError):
    """Balance does not fit the 112-bit reserve width."""

    pass


class KInvariant(PairError):
    """Fee-adjusted reserve product decreased across a swap."""

    pass


class InvalidRecipient(PairError):
    """Output recipient is one of the pair's own asset ids."""

    pass


class CallbackFailed(PairError):
    """Flash borrower did not return the acknowledgment value."""

    pass


class RepaymentFailed(PairError):
    """Flash loan was not repaid with its fee."""

    pass


class TransferFailed(PairError):
    """Asset transfer was rejected by the token."""

    pass


class IdenticalAddresses(PairError):
    """Pair requested for a token with itself."""

    pass


class ZeroAddress(PairError):
    """Pair requested with the zero address as a token."""

    pass


class PairExists(PairError):
    """A pair for these tokens was already created."""

    pass
