"""Collaborator protocols consumed by the pair engine.

The engine only depends on these structural interfaces. In-memory reference
implementations live in pairpool.ledger and pairpool.factory.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# What a token transfer may return: nothing (minimal tokens), a bool, or a
# raw ABI-encoded return payload.
TransferResult = bool | bytes | None


@runtime_checkable
class AssetToken(Protocol):
    """A fungible asset held by the pair."""

    address: str

    def balance_of(self, owner: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> TransferResult: ...

    def transfer_from(
        self, spender: str, owner: str, to: str, amount: int
    ) -> TransferResult: ...


class ClaimLedger(Protocol):
    """Claim-token ledger; the engine uses only these operations."""

    def mint(self, to: str, amount: int) -> None: ...

    def burn(self, owner: str, amount: int) -> None: ...

    def balance_of(self, owner: str) -> int: ...

    def total_supply(self) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...


class FeeRecipientSource(Protocol):
    """Registry exposing the protocol fee recipient (None or zero address: off)."""

    @property
    def fee_to(self) -> str | None: ...


@runtime_checkable
class FlashBorrower(Protocol):
    """Receiver of a flash loan.

    on_flash_loan is called synchronously while the pair lock is held, after
    `amount` of `asset` was transferred to the borrower. It must send back
    amount + fee to the pair and return CALLBACK_SUCCESS.
    """

    address: str

    def on_flash_loan(
        self,
        initiator: str,
        asset: str,
        amount: int,
        fee: int,
        data: bytes,
    ) -> bytes: ...
