"""Balance/allowance bookkeeping shared by the in-memory token ledgers.

Every change is applied as a signed delta. Inside a transaction the inverse
delta is logged, so a rollback reverses exactly this thread's own changes
and leaves moves made by other pairs or other threads in place.
"""

from __future__ import annotations

import threading
from functools import partial

from pairpool import journal
from pairpool.ledger.errors import InsufficientAllowance, InsufficientBalance
from pairpool.models.types import normalize_address

# Allowance that is never decremented
MAX_ALLOWANCE = 2**256 - 1


class BalanceLedger:
    """Balances, allowances and supply keyed by lowercase address."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._supply = 0
        self._lock = threading.Lock()

    def total_supply(self) -> int:
        return self._supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(normalize_address(owner), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"Cannot approve negative amount: {amount}")
        key = (normalize_address(owner), normalize_address(spender))
        with self._lock:
            delta = amount - self._allowances.get(key, 0)
            self._allowances[key] = amount
        journal.record(partial(self._shift_allowance, key, -delta))
        return True

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount: {amount}")
        self._change_supply(amount)
        self._credit(normalize_address(to), amount)

    def burn(self, owner: str, amount: int) -> None:
        """Destroy `amount` of `owner`'s tokens.

        Raises:
            InsufficientBalance: If owner holds less than amount
        """
        self._debit(normalize_address(owner), amount, "burn")
        self._change_supply(-amount)

    def _spend_allowance(self, spender: str, owner: str, amount: int) -> None:
        """Consume allowance; MAX_ALLOWANCE is treated as infinite.

        Raises:
            InsufficientAllowance: If spender's allowance is below amount
        """
        key = (normalize_address(owner), normalize_address(spender))
        with self._lock:
            allowed = self._allowances.get(key, 0)
            if allowed == MAX_ALLOWANCE:
                return
            if amount > allowed:
                raise InsufficientAllowance(
                    f"{key[1]} may move {allowed} of {key[0]}, not {amount}"
                )
            self._allowances[key] = allowed - amount
        journal.record(partial(self._shift_allowance, key, amount))

    def _debit(self, owner: str, amount: int, action: str) -> None:
        with self._lock:
            balance = self._balances.get(owner, 0)
            if amount < 0 or amount > balance:
                raise InsufficientBalance(f"{action} {amount} from {owner} holding {balance}")
            self._balances[owner] = balance - amount
        journal.record(partial(self._shift_balance, owner, amount))

    def _credit(self, owner: str, amount: int) -> None:
        self._shift_balance(owner, amount)
        journal.record(partial(self._shift_balance, owner, -amount))

    def _change_supply(self, delta: int) -> None:
        self._shift_supply(delta)
        journal.record(partial(self._shift_supply, -delta))

    def _move(self, sender: str, to: str, amount: int) -> None:
        self._debit(normalize_address(sender), amount, "transfer")
        self._credit(normalize_address(to), amount)

    # Unlogged primitives, also used to apply undo actions.

    def _shift_balance(self, owner: str, delta: int) -> None:
        with self._lock:
            self._balances[owner] = self._balances.get(owner, 0) + delta

    def _shift_allowance(self, key: tuple[str, str], delta: int) -> None:
        with self._lock:
            self._allowances[key] = self._allowances.get(key, 0) + delta

    def _shift_supply(self, delta: int) -> None:
        with self._lock:
            self._supply += delta
