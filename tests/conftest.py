"""Pytest configuration and fixtures."""

import pytest

from pairpool.factory import PairFactory
from pairpool.pair.engine import PairEngine
from tests.helpers import ALICE, ManualClock, make_pair, provide


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at T0."""
    return ManualClock()


@pytest.fixture
def factory_and_pair(clock: ManualClock) -> tuple[PairFactory, PairEngine]:
    """Factory with one empty USDC/WETH pair."""
    return make_pair(clock=clock)


@pytest.fixture
def factory(factory_and_pair: tuple[PairFactory, PairEngine]) -> PairFactory:
    return factory_and_pair[0]


@pytest.fixture
def pair(factory_and_pair: tuple[PairFactory, PairEngine]) -> PairEngine:
    """Empty USDC/WETH pair (token_a is USDC)."""
    return factory_and_pair[1]


@pytest.fixture
def seeded_pair(pair: PairEngine) -> PairEngine:
    """Pair seeded by ALICE with reserves (1_000_000, 4_000_000)."""
    provide(pair, ALICE, 1_000_000, 4_000_000)
    return pair
