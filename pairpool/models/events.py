"""Pydantic models for notifications emitted by a pair.

Events are buffered while an operation runs and published only once it
commits, so a reverted operation never leaves an event behind.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Discriminator, Field

from pairpool.models.types import Address

NonNegative = Annotated[int, Field(ge=0)]


class _Event(BaseModel):
    model_config = {"frozen": True}


class Sync(_Event):
    """Reserves were rewritten by the update routine."""

    kind: Literal["sync"] = "sync"
    reserve_a: NonNegative
    reserve_b: NonNegative


class Mint(_Event):
    """Liquidity was added."""

    kind: Literal["mint"] = "mint"
    sender: Address
    amount_a: NonNegative
    amount_b: NonNegative


class Burn(_Event):
    """Liquidity was removed."""

    kind: Literal["burn"] = "burn"
    sender: Address
    amount_a: NonNegative
    amount_b: NonNegative
    to: Address


class Swap(_Event):
    """One asset was exchanged for the other."""

    kind: Literal["swap"] = "swap"
    sender: Address
    amount_a_in: NonNegative
    amount_b_in: NonNegative
    amount_a_out: NonNegative
    amount_b_out: NonNegative
    to: Address


class Skim(_Event):
    """Balances above reserves were sent to a recipient."""

    kind: Literal["skim"] = "skim"
    to: Address
    amount_a: NonNegative = 0
    amount_b: NonNegative = 0


class FlashLoan(_Event):
    """A flash loan was taken and repaid."""

    kind: Literal["flash_loan"] = "flash_loan"
    initiator: Address
    borrower: Address
    asset: Address
    amount: NonNegative
    fee: NonNegative


PairEvent = Annotated[
    Sync | Mint | Burn | Swap | Skim | FlashLoan,
    Discriminator("kind"),
]
