"""Time-weighted average prices from pair accumulators.

A pair's cumulative prices only advance when it is touched. Readers get a
current value without writing to the pair by extrapolating from the last
update at the current reserves (current_cumulative_prices). The average
price over a window is the wrapped difference of two samples divided by the
wrapped elapsed time; both differences are modular, so overflow of either
counter between samples does not matter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from pairpool.errors import Forbidden
from pairpool.math.uq112x112 import mul_decode
from pairpool.models.types import normalize_address
from pairpool.pair.state import CUMULATIVE_BITS, accumulate, block_timestamp, elapsed_since
from pairpool.safe_int import S

if TYPE_CHECKING:
    from pairpool.pair.engine import PairEngine

logger = structlog.get_logger()


@dataclass(frozen=True)
class Observation:
    """Cumulative prices sampled at a 32-bit timestamp."""

    timestamp: int
    price_a_cumulative: int
    price_b_cumulative: int


def current_cumulative_prices(pair: PairEngine, now: int | None = None) -> Observation:
    """Accumulator values as of `now`, as if the pair had just been updated."""
    now = pair.now() if now is None else now
    reserve_a, reserve_b, last = pair.get_reserves()
    elapsed = elapsed_since(last, now)
    price_a, price_b = accumulate(
        pair.price_a_cumulative_last,
        pair.price_b_cumulative_last,
        reserve_a,
        reserve_b,
        elapsed,
    )
    return Observation(block_timestamp(now), price_a, price_b)


def average_prices(older: Observation, newer: Observation) -> tuple[int, int]:
    """TWAP of both directions between two samples, as UQ112x112.

    Raises:
        ValueError: If no time passed between the samples
    """
    elapsed = elapsed_since(older.timestamp, newer.timestamp)
    if elapsed == 0:
        raise ValueError("observations share a timestamp")
    delta_a = S(newer.price_a_cumulative).wrapping_sub(older.price_a_cumulative, CUMULATIVE_BITS)
    delta_b = S(newer.price_b_cumulative).wrapping_sub(older.price_b_cumulative, CUMULATIVE_BITS)
    return (delta_a // elapsed).value, (delta_b // elapsed).value


def consult(price_average: int, amount_in: int) -> int:
    """Convert an amount at a UQ112x112 average price (floor)."""
    return mul_decode(price_average, amount_in)


class FixedWindowOracle:
    """Average price of one pair over a fixed, periodically refreshed window.

    Call update() at least once per period; consult() answers from the most
    recent completed window.
    """

    def __init__(self, pair: PairEngine, period: int) -> None:
        reserve_a, reserve_b, _ = pair.get_reserves()
        if reserve_a == 0 or reserve_b == 0:
            raise ValueError("pair has no reserves")
        if period <= 0:
            raise ValueError(f"period must be positive: {period}")
        self.pair = pair
        self.period = period
        self._last = current_cumulative_prices(pair)
        self.price_a_average = 0
        self.price_b_average = 0

    def update(self, now: int | None = None) -> bool:
        """Close the window if a full period passed.

        Returns:
            True if the averages were refreshed
        """
        observation = current_cumulative_prices(self.pair, now)
        elapsed = elapsed_since(self._last.timestamp, observation.timestamp)
        if elapsed < self.period:
            logger.debug("oracle_period_not_elapsed", elapsed=elapsed, period=self.period)
            return False
        self.price_a_average, self.price_b_average = average_prices(self._last, observation)
        self._last = observation
        return True

    def consult(self, token_in: str, amount_in: int) -> int:
        """Value of `amount_in` of `token_in` in the other token at the window average.

        Raises:
            Forbidden: If token_in is not in the pair
        """
        token = self.pair.token_for(normalize_address(token_in))
        if token is None:
            raise Forbidden(f"token {token_in} not in pair")
        average = self.price_a_average if token is self.pair.token_a else self.price_b_average
        return consult(average, amount_in)
