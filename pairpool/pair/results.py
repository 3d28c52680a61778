"""Return types of pair operations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MintResult:
    """Outcome of adding liquidity.

    Attributes:
        liquidity: Claim tokens minted to the recipient
        amount_a: Token A actually received by the pair
        amount_b: Token B actually received by the pair
    """

    liquidity: int
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class BurnResult:
    """Outcome of removing liquidity."""

    liquidity: int
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class SwapResult:
    """Outcome of an exact-input swap.

    amount_in is what the pair measured as received, which can be less than
    the amount the caller sent for tokens that charge on transfer.
    """

    token_in: str
    token_out: str
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class FlashLoanResult:
    """Outcome of a repaid flash loan."""

    asset: str
    amount: int
    fee: int
