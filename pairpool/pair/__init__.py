"""Pair engine: reserve state, invariant math, liquidity, fees and flash loans."""

from pairpool.pair import liquidity_math, swap_math
from pairpool.pair.state import PairState
from pairpool.pair.results import BurnResult, FlashLoanResult, MintResult, SwapResult
from pairpool.pair.engine import PairEngine, system_clock
from pairpool.pair.flash_loan import FlashLoanCoordinator

__all__ = [
    "PairEngine",
    "PairState",
    "FlashLoanCoordinator",
    "MintResult",
    "BurnResult",
    "SwapResult",
    "FlashLoanResult",
    "liquidity_math",
    "swap_math",
    "system_clock",
]
