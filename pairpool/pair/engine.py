"""Constant-product pair engine.

PairEngine owns one asset pair: its reserve state, its claim-token ledger
and the operations that move assets in and out. Every mutating operation
(mint, burn, swap, skim, sync, flash_loan):

- holds the pair's ReentrancyGuard for its whole duration,
- runs inside the thread's transaction, which undoes its changes to the
  pair state and to every ledger if anything raises,
- ends with the reserve update routine,
- publishes its events only after the outermost transaction commits.

Balances are always re-read after transfers; amounts the pair acts on are
balance deltas over recorded reserves, never the amounts callers claim to
have sent.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from pairpool import journal
from pairpool.config import DEFAULT_PAIR_CONFIG, PairConfig
from pairpool.constants import BURN_ADDRESS
from pairpool.errors import (
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidRecipient,
    TransferFailed,
)
from pairpool.guard import ReentrancyGuard
from pairpool.interfaces import (
    AssetToken,
    ClaimLedger,
    FeeRecipientSource,
    FlashBorrower,
)
from pairpool.ledger.claim_token import ClaimTokenLedger
from pairpool.ledger.errors import LedgerError
from pairpool.models.events import Burn, FlashLoan, Mint, PairEvent, Skim, Swap
from pairpool.models.types import address_to_bytes, normalize_address
from pairpool.pair import liquidity_math, swap_math
from pairpool.pair.flash_loan import FlashLoanCoordinator
from pairpool.pair.protocol_fee import mint_fee
from pairpool.pair.results import BurnResult, FlashLoanResult, MintResult, SwapResult
from pairpool.pair.state import PairState
from pairpool.safe_int import S
from pairpool.transfer import safe_transfer, safe_transfer_from

logger = structlog.get_logger()

EventListener = Callable[[PairEvent], None]


def system_clock() -> int:
    """Wall-clock seconds."""
    return int(time.time())


class PairEngine:
    """One constant-product pool over two assets.

    Tokens are stored in canonical order: token_a has the lower address.

    Attributes:
        address: The pair's own account in both asset ledgers
        token_a: Asset with the lower address
        token_b: Asset with the higher address
        ledger: Claim-token ledger for this pair
        state: Reserves, timestamp, cumulative prices and k_last
        events: Committed events, oldest first
    """

    def __init__(
        self,
        token_x: AssetToken,
        token_y: AssetToken,
        *,
        address: str,
        fee_source: FeeRecipientSource | None = None,
        ledger: ClaimLedger | None = None,
        clock: Callable[[], int] = system_clock,
        config: PairConfig = DEFAULT_PAIR_CONFIG,
    ) -> None:
        x_bytes = address_to_bytes(token_x.address)
        y_bytes = address_to_bytes(token_y.address)
        if x_bytes == y_bytes:
            raise ValueError(f"pair needs two distinct tokens, got {token_x.address} twice")
        if x_bytes > y_bytes:
            token_x, token_y = token_y, token_x

        self.address = normalize_address(address, validate=True)
        self.token_a = token_x
        self.token_b = token_y
        self.ledger: ClaimLedger = ledger if ledger is not None else ClaimTokenLedger()
        self.state = PairState()
        self.config = config
        self.events: list[PairEvent] = []
        self._fee_source = fee_source
        self._clock = clock
        self._guard = ReentrancyGuard()
        self._pending: list[PairEvent] | None = None
        self._listeners: list[EventListener] = []
        self.flash = FlashLoanCoordinator(self)

    def __repr__(self) -> str:
        return f"PairEngine({self.address}, {self.token_a.address}/{self.token_b.address})"

    # --- Read-only views (no lock) ---

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve_a, reserve_b, block_timestamp_last)."""
        return self.state.reserve_a, self.state.reserve_b, self.state.block_timestamp_last

    @property
    def price_a_cumulative_last(self) -> int:
        return self.state.price_a_cumulative_last

    @property
    def price_b_cumulative_last(self) -> int:
        return self.state.price_b_cumulative_last

    @property
    def k_last(self) -> int:
        return self.state.k_last

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def now(self) -> int:
        """Current clock reading in seconds."""
        return self._clock()

    def fee_to(self) -> str | None:
        """Configured protocol fee recipient, if any."""
        if self._fee_source is None:
            return None
        return self._fee_source.fee_to

    def token_for(self, asset: str) -> AssetToken | None:
        """Resolve an asset address to one of the pair's tokens."""
        asset_norm = normalize_address(asset)
        if asset_norm == normalize_address(self.token_a.address):
            return self.token_a
        if asset_norm == normalize_address(self.token_b.address):
            return self.token_b
        return None

    def is_token_a(self, asset: str) -> bool:
        return self.token_for(asset) is self.token_a

    def _oriented(self, token_in: str) -> tuple[AssetToken, AssetToken, int, int]:
        """Return (token_in, token_out, reserve_in, reserve_out).

        Raises:
            Forbidden: If token_in is not one of the pair's tokens
        """
        token = self.token_for(token_in)
        if token is None:
            raise Forbidden(f"token {token_in} not in pair")
        if token is self.token_a:
            return self.token_a, self.token_b, self.state.reserve_a, self.state.reserve_b
        return self.token_b, self.token_a, self.state.reserve_b, self.state.reserve_a

    def quote(self, token_in: str, amount_in: int) -> int:
        """Amount of the other token equal in value to `amount_in` at the reserve ratio."""
        _, _, reserve_in, reserve_out = self._oriented(token_in)
        return liquidity_math.quote(amount_in, reserve_in, reserve_out)

    def get_amount_out(self, token_in: str, amount_in: int) -> int:
        """Output a swap of exactly `amount_in` would pay at current reserves."""
        _, _, reserve_in, reserve_out = self._oriented(token_in)
        return swap_math.get_amount_out(amount_in, reserve_in, reserve_out, self.config)

    def get_amount_in(self, token_out: str, amount_out: int) -> int:
        """Input needed to receive at least `amount_out` of `token_out`."""
        token = self.token_for(token_out)
        if token is None:
            raise Forbidden(f"token {token_out} not in pair")
        other = self.token_b if token is self.token_a else self.token_a
        _, _, reserve_in, reserve_out = self._oriented(other.address)
        return swap_math.get_amount_in(amount_out, reserve_in, reserve_out, self.config)

    def max_loanable(self, asset: str) -> int:
        return self.flash.max_loanable(asset)

    def loan_fee(self, asset: str, amount: int) -> int:
        return self.flash.loan_fee(asset, amount)

    # --- Events ---

    def subscribe(self, listener: EventListener) -> None:
        """Call `listener` with every event this pair commits."""
        self._listeners.append(listener)

    def _emit(self, event: PairEvent) -> None:
        if self._pending is None:
            raise RuntimeError("events can only be emitted inside a transaction")
        self._pending.append(event)

    def _publish(self, operation: str, events: list[PairEvent]) -> None:
        for event in events:
            self.events.append(event)
            logger.info(
                f"pair_{event.kind}",
                pair=self.address,
                operation=operation,
                **event.model_dump(exclude={"kind"}),
            )
            for listener in self._listeners:
                listener(event)

    # --- Transactions ---

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """Run a block under the pair lock with all-or-nothing semantics.

        Joins the thread's open transaction when called from inside another
        operation; events are published once the outermost one commits.
        """
        with journal.transaction() as txn, self._guard.hold(operation):
            checkpoint = self.state.snapshot()
            txn.record(lambda: self.state.restore(checkpoint))
            self._pending = []
            try:
                yield
            except Exception as err:
                self._pending = None
                logger.warning(
                    "pair_operation_reverted",
                    pair=self.address,
                    operation=operation,
                    error=type(err).__name__,
                    detail=str(err),
                )
                raise
            committed, self._pending = self._pending, None
            txn.after_commit(lambda: self._publish(operation, committed))

    def _balances(self) -> tuple[int, int]:
        return self.token_a.balance_of(self.address), self.token_b.balance_of(self.address)

    def _update(self, balance_a: int, balance_b: int) -> None:
        self._emit(self.state.update(balance_a, balance_b, self._clock()))

    # --- Mutating operations ---

    def mint(
        self,
        sender: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        to: str | None = None,
    ) -> MintResult:
        """Add liquidity from `sender` and mint claim tokens to `to`.

        The pair pulls tokens with transfer_from, so `sender` must have
        approved the pair address in both asset ledgers.

        Args:
            sender: Account paying both assets
            amount_a_desired: Most token A the sender will deposit
            amount_b_desired: Most token B the sender will deposit
            amount_a_min: Least token A accepted after ratio matching
            amount_b_min: Least token B accepted after ratio matching
            to: Claim token recipient (default: sender)

        Returns:
            MintResult with minted liquidity and the amounts received

        Raises:
            InsufficientInputAmount: If the deposit cannot meet its minimums
            InsufficientLiquidityMinted: If the deposit would mint nothing
            TransferFailed: If either token rejects the pull
            Overflow: If resulting balances exceed 112 bits
        """
        sender = normalize_address(sender, validate=True)
        to = normalize_address(to or sender, validate=True)

        with self._transaction("mint"):
            reserve_a, reserve_b, _ = self.get_reserves()
            amount_a, amount_b = liquidity_math.optimal_deposit(
                amount_a_desired,
                amount_b_desired,
                amount_a_min,
                amount_b_min,
                reserve_a,
                reserve_b,
            )
            safe_transfer_from(self.token_a, self.address, sender, self.address, amount_a)
            safe_transfer_from(self.token_b, self.address, sender, self.address, amount_b)

            balance_a, balance_b = self._balances()
            received_a = (S(balance_a) - reserve_a).value
            received_b = (S(balance_b) - reserve_b).value

            fee_on = mint_fee(self.state, self.ledger, self.fee_to(), self.config)
            total_supply = self.ledger.total_supply()  # after the fee mint
            liquidity = liquidity_math.liquidity_to_mint(
                received_a, received_b, reserve_a, reserve_b, total_supply, self.config
            )
            if total_supply == 0:
                self.ledger.mint(BURN_ADDRESS, self.config.minimum_liquidity)
            self.ledger.mint(to, liquidity)

            self._update(balance_a, balance_b)
            if fee_on:
                self.state.k_last = self.state.k
            self._emit(Mint(sender=sender, amount_a=received_a, amount_b=received_b))

        return MintResult(liquidity=liquidity, amount_a=received_a, amount_b=received_b)

    def burn(
        self,
        sender: str,
        liquidity: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        to: str | None = None,
    ) -> BurnResult:
        """Redeem `liquidity` of sender's claim tokens for both assets.

        Any claim tokens already sitting in the pair's own account are
        redeemed along with the sender's.

        Raises:
            TransferFailed: If the sender lacks the claim tokens or a payout fails
            InsufficientLiquidityBurned: If either payout rounds to zero
            InsufficientOutputAmount: If a payout is below its minimum
        """
        sender = normalize_address(sender, validate=True)
        to = normalize_address(to or sender, validate=True)

        with self._transaction("burn"):
            try:
                self.ledger.transfer(sender, self.address, liquidity)
            except LedgerError as err:
                raise TransferFailed(f"claim token transfer from {sender} failed: {err}") from err

            balance_a, balance_b = self._balances()
            fee_on = mint_fee(self.state, self.ledger, self.fee_to(), self.config)
            total_supply = self.ledger.total_supply()  # after the fee mint
            held = self.ledger.balance_of(self.address)
            amount_a, amount_b = liquidity_math.amounts_for_burn(
                held, balance_a, balance_b, total_supply
            )
            if amount_a < amount_a_min or amount_b < amount_b_min:
                raise InsufficientOutputAmount(
                    f"burn pays ({amount_a}, {amount_b}), minimum ({amount_a_min}, {amount_b_min})"
                )

            self.ledger.burn(self.address, held)
            safe_transfer(self.token_a, self.address, to, amount_a)
            safe_transfer(self.token_b, self.address, to, amount_b)

            self._update(*self._balances())
            if fee_on:
                self.state.k_last = self.state.k
            self._emit(Burn(sender=sender, amount_a=amount_a, amount_b=amount_b, to=to))

        return BurnResult(liquidity=held, amount_a=amount_a, amount_b=amount_b)

    def swap(
        self,
        sender: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        to: str | None = None,
    ) -> SwapResult:
        """Swap exactly `amount_in` of `token_in` for the other token.

        Args:
            sender: Account paying the input (must have approved the pair)
            token_in: Address of the offered token
            amount_in: Amount the pair pulls from sender
            amount_out_min: Least output accepted (must be positive)
            to: Output recipient (default: sender)

        Returns:
            SwapResult with the input actually received and the output paid

        Raises:
            InsufficientOutputAmount: If amount_out_min is zero or not reached
            InsufficientInputAmount: If amount_in is zero or nothing arrived
            InsufficientLiquidity: If amount_out_min exceeds the output reserve
            Forbidden: If token_in is not in the pair
            InvalidRecipient: If `to` is one of the pair's tokens
            KInvariant: If the fee-adjusted product would decrease
        """
        sender = normalize_address(sender, validate=True)
        to = normalize_address(to or sender, validate=True)

        with self._transaction("swap"):
            if amount_out_min <= 0:
                raise InsufficientOutputAmount(
                    f"amount_out_min must be positive: {amount_out_min}"
                )
            if amount_in <= 0:
                raise InsufficientInputAmount(f"amount_in must be positive: {amount_in}")

            token_src, token_dst, reserve_in, reserve_out = self._oriented(token_in)
            if amount_out_min > reserve_out:
                raise InsufficientLiquidity(
                    f"amount_out_min {amount_out_min} exceeds reserve {reserve_out}"
                )
            if self.token_for(to) is not None:
                raise InvalidRecipient(f"cannot send output to token {to}")

            safe_transfer_from(token_src, self.address, sender, self.address, amount_in)
            # measured against the offered token's own reserve
            received = (S(token_src.balance_of(self.address)) - reserve_in).value
            amount_out = swap_math.get_amount_out(received, reserve_in, reserve_out, self.config)
            if amount_out < amount_out_min:
                raise InsufficientOutputAmount(
                    f"output {amount_out} below minimum {amount_out_min}"
                )

            safe_transfer(token_dst, self.address, to, amount_out)

            reserve_a, reserve_b, _ = self.get_reserves()
            balance_a, balance_b = self._balances()
            a_in = token_src is self.token_a
            amount_a_out = 0 if a_in else amount_out
            amount_b_out = amount_out if a_in else 0
            amount_a_in = swap_math.amount_received(balance_a, reserve_a, amount_a_out)
            amount_b_in = swap_math.amount_received(balance_b, reserve_b, amount_b_out)
            if amount_a_in == 0 and amount_b_in == 0:
                raise InsufficientInputAmount("no input arrived")
            swap_math.check_k(
                balance_a, balance_b, amount_a_in, amount_b_in, reserve_a, reserve_b, self.config
            )

            self._update(balance_a, balance_b)
            self._emit(
                Swap(
                    sender=sender,
                    amount_a_in=amount_a_in,
                    amount_b_in=amount_b_in,
                    amount_a_out=amount_a_out,
                    amount_b_out=amount_b_out,
                    to=to,
                )
            )

        return SwapResult(
            token_in=normalize_address(token_src.address),
            token_out=normalize_address(token_dst.address),
            amount_in=received,
            amount_out=amount_out,
        )

    def skim(self, to: str) -> tuple[int, int]:
        """Send balances above the recorded reserves to `to`.

        Returns:
            (excess_a, excess_b) that was sent
        """
        to = normalize_address(to, validate=True)

        with self._transaction("skim"):
            balance_a, balance_b = self._balances()
            excess_a = (S(balance_a) - self.state.reserve_a).value
            excess_b = (S(balance_b) - self.state.reserve_b).value
            if excess_a:
                safe_transfer(self.token_a, self.address, to, excess_a)
            if excess_b:
                safe_transfer(self.token_b, self.address, to, excess_b)
            self._update(*self._balances())
            self._emit(Skim(to=to, amount_a=excess_a, amount_b=excess_b))

        return excess_a, excess_b

    def sync(self) -> tuple[int, int]:
        """Force reserves to match the actual balances.

        Returns:
            The new (reserve_a, reserve_b)
        """
        with self._transaction("sync"):
            self._update(*self._balances())
        return self.state.reserve_a, self.state.reserve_b

    def flash_loan(
        self,
        initiator: str,
        borrower: FlashBorrower,
        asset: str,
        amount: int,
        data: bytes = b"",
    ) -> FlashLoanResult:
        """Lend `amount` of `asset` to `borrower` for the duration of its callback.

        Reserves are resynchronized after repayment, so the fee is credited
        to liquidity providers right away.

        Raises:
            Forbidden: If the pair does not hold `asset`
            InsufficientInputAmount: If amount is zero
            InsufficientLiquidity: If amount exceeds the reserve
            CallbackFailed: If the borrower returned the wrong acknowledgment
            RepaymentFailed: If amount + fee was not returned
        """
        initiator = normalize_address(initiator, validate=True)

        with self._transaction("flash_loan"):
            fee = self.flash.execute(initiator, borrower, asset, amount, data)
            self._update(*self._balances())
            self._emit(
                FlashLoan(
                    initiator=initiator,
                    borrower=normalize_address(borrower.address),
                    asset=normalize_address(asset),
                    amount=amount,
                    fee=fee,
                )
            )

        return FlashLoanResult(asset=normalize_address(asset), amount=amount, fee=fee)
