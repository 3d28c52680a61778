"""In-memory asset tokens.

These stand in for the two external assets a pair holds. Each variant models
a real-world token behavior the pair has to tolerate:

- Erc20Token: returns True on success
- NoReturnToken: returns nothing on success (empty payload)
- AbiReturnToken: returns an ABI-encoded bool payload
- FeeOnTransferToken: destroys a basis-point cut of every transfer, so the
  receiver gets less than the amount sent
"""

from __future__ import annotations

from eth_abi import encode  # type: ignore[attr-defined]

from pairpool.interfaces import TransferResult
from pairpool.ledger.base import BalanceLedger
from pairpool.models.types import normalize_address


class Erc20Token(BalanceLedger):
    """Standard token; `mint` doubles as a faucet for simulations and tests."""

    def __init__(self, address: str, symbol: str = "", decimals: int = 18) -> None:
        super().__init__()
        self.address = normalize_address(address, validate=True)
        self.symbol = symbol
        self.decimals = decimals

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol or self.address})"

    def transfer(self, sender: str, to: str, amount: int) -> TransferResult:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> TransferResult:
        self._spend_allowance(spender, owner, amount)
        self._move(owner, to, amount)
        return True


class NoReturnToken(Erc20Token):
    """Token whose transfer functions return no value."""

    def transfer(self, sender: str, to: str, amount: int) -> TransferResult:
        super().transfer(sender, to, amount)
        return None

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> TransferResult:
        super().transfer_from(spender, owner, to, amount)
        return None


class AbiReturnToken(Erc20Token):
    """Token returning a raw ABI-encoded bool.

    With `succeed=False` the transfer is not applied and the payload encodes
    false, mimicking tokens that signal failure instead of reverting.
    """

    def __init__(
        self, address: str, symbol: str = "", decimals: int = 18, succeed: bool = True
    ) -> None:
        super().__init__(address, symbol, decimals)
        self.succeed = succeed

    def transfer(self, sender: str, to: str, amount: int) -> TransferResult:
        if self.succeed:
            super().transfer(sender, to, amount)
        return encode(["bool"], [self.succeed])

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> TransferResult:
        if self.succeed:
            super().transfer_from(spender, owner, to, amount)
        return encode(["bool"], [self.succeed])


class FeeOnTransferToken(Erc20Token):
    """Token that burns `fee_bps` basis points of every transferred amount."""

    def __init__(
        self, address: str, symbol: str = "", decimals: int = 18, fee_bps: int = 100
    ) -> None:
        super().__init__(address, symbol, decimals)
        if not 0 <= fee_bps < 10_000:
            raise ValueError(f"fee_bps must be in [0, 10000): {fee_bps}")
        self.fee_bps = fee_bps

    def _move(self, sender: str, to: str, amount: int) -> None:
        cut = amount * self.fee_bps // 10_000
        sender_norm = normalize_address(sender)
        self._debit(sender_norm, amount, "transfer")
        self._credit(normalize_address(to), amount - cut)
        self._change_supply(-cut)
