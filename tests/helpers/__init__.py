"""Test helpers module for shared test utilities.

- constants: Token and account addresses
- factories: Pair, funding and flash borrower helpers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    BORROWER,
    CAROL,
    DAI,
    FEE_SINK,
    SETTER,
    T0,
    USDC,
    USDC_WETH_PAIR,
    WETH,
)
from tests.helpers.factories import (
    ManualClock,
    RepayingBorrower,
    fund,
    make_pair,
    provide,
)

__all__ = [
    # Constants
    "USDC",
    "WETH",
    "DAI",
    "USDC_WETH_PAIR",
    "ALICE",
    "BOB",
    "CAROL",
    "SETTER",
    "FEE_SINK",
    "BORROWER",
    "T0",
    # Factories
    "ManualClock",
    "RepayingBorrower",
    "fund",
    "make_pair",
    "provide",
]
