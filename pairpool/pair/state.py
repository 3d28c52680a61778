"""Reserve state and the price accumulator.

PairState holds everything a pair records between operations. Reserves, the
timestamp and the two cumulative prices change together, only through
update(); k_last is maintained by the protocol fee checkpoint.

Wraparound is explicit: timestamps live modulo 2**32 and the cumulative
prices modulo 2**256. Oracle readers difference two samples with the same
modular arithmetic, so a wrapped accumulator still yields the right average.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from pairpool.constants import UINT32_MODULUS
from pairpool.errors import Overflow
from pairpool.math.uq112x112 import spot_price
from pairpool.models.events import Sync
from pairpool.safe_int import S

logger = structlog.get_logger()

RESERVE_BITS = 112
TIMESTAMP_BITS = 32
CUMULATIVE_BITS = 256


def block_timestamp(now: int) -> int:
    """Reduce a clock reading to the 32-bit timestamp the pair stores."""
    return now % UINT32_MODULUS


def elapsed_since(last: int, now: int) -> int:
    """Seconds between two 32-bit timestamps, tolerating one wraparound."""
    return S(block_timestamp(now)).wrapping_sub(last, TIMESTAMP_BITS).value


def accumulate(
    price_a_cumulative: int,
    price_b_cumulative: int,
    reserve_a: int,
    reserve_b: int,
    elapsed: int,
) -> tuple[int, int]:
    """Advance both cumulative prices by `elapsed` seconds at the given reserves.

    Returns the inputs unchanged when no time passed or a reserve is empty.
    """
    if elapsed <= 0 or reserve_a == 0 or reserve_b == 0:
        return price_a_cumulative, price_b_cumulative

    price_a = spot_price(reserve_a, reserve_b)  # B per A
    price_b = spot_price(reserve_b, reserve_a)  # A per B
    return (
        S(price_a_cumulative).wrapping_add(price_a * elapsed, CUMULATIVE_BITS).value,
        S(price_b_cumulative).wrapping_add(price_b * elapsed, CUMULATIVE_BITS).value,
    )


@dataclass
class PairState:
    """Mutable per-pair state.

    Attributes:
        reserve_a: Recorded balance of token A (uint112)
        reserve_b: Recorded balance of token B (uint112)
        block_timestamp_last: 32-bit time of the last update
        price_a_cumulative_last: Sum of (B per A as UQ112x112) * seconds, mod 2**256
        price_b_cumulative_last: Sum of (A per B as UQ112x112) * seconds, mod 2**256
        k_last: reserve_a * reserve_b after the last fee checkpoint (0: none/off)
    """

    reserve_a: int = 0
    reserve_b: int = 0
    block_timestamp_last: int = 0
    price_a_cumulative_last: int = 0
    price_b_cumulative_last: int = 0
    k_last: int = 0

    @property
    def k(self) -> int:
        """Current reserve product."""
        return self.reserve_a * self.reserve_b

    def update(self, balance_a: int, balance_b: int, now: int) -> Sync:
        """Record new balances as reserves and integrate price over elapsed time.

        Cumulative prices advance using the reserves from *before* this
        update, i.e. the price that held during the elapsed interval.

        Args:
            balance_a: Actual held balance of token A
            balance_b: Actual held balance of token B
            now: Current clock reading in seconds (reduced mod 2**32)

        Returns:
            Sync event carrying the new reserves

        Raises:
            Overflow: If either balance exceeds 2**112 - 1
        """
        if not S(balance_a).fits(RESERVE_BITS) or not S(balance_b).fits(RESERVE_BITS):
            raise Overflow(f"balances ({balance_a}, {balance_b}) exceed uint112")

        timestamp = block_timestamp(now)
        elapsed = elapsed_since(self.block_timestamp_last, timestamp)
        self.price_a_cumulative_last, self.price_b_cumulative_last = accumulate(
            self.price_a_cumulative_last,
            self.price_b_cumulative_last,
            self.reserve_a,
            self.reserve_b,
            elapsed,
        )

        self.reserve_a = balance_a
        self.reserve_b = balance_b
        self.block_timestamp_last = timestamp

        logger.debug(
            "reserves_updated",
            reserve_a=balance_a,
            reserve_b=balance_b,
            elapsed=elapsed,
            timestamp=timestamp,
        )
        return Sync(reserve_a=balance_a, reserve_b=balance_b)

    def snapshot(self) -> PairState:
        return replace(self)

    def restore(self, snapshot: PairState) -> None:
        self.__dict__.update(replace(snapshot).__dict__)
