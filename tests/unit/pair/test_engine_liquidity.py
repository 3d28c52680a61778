"""Tests for PairEngine mint, burn, sync, skim and the protocol fee."""

import pytest

from pairpool.constants import Q112, UINT112_MAX, ZERO_ADDRESS
from pairpool.errors import (
    InsufficientInputAmount,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    Overflow,
    TransferFailed,
)
from pairpool.models.events import Burn, Mint, Skim, Sync
from pairpool.pair.protocol_fee import protocol_fee_liquidity
from tests.helpers import ALICE, BOB, CAROL, FEE_SINK, SETTER, T0, fund, provide


class TestFirstDeposit:
    """The first mint sets the price and locks MINIMUM_LIQUIDITY."""

    def test_mints_sqrt_minus_minimum(self, pair):
        result = provide(pair, ALICE, 1_000_000, 4_000_000)

        assert result.liquidity == 1_999_000
        assert (result.amount_a, result.amount_b) == (1_000_000, 4_000_000)
        assert pair.ledger.balance_of(ALICE) == 1_999_000
        assert pair.ledger.balance_of(ZERO_ADDRESS) == 1_000
        assert pair.total_supply() == 2_000_000
        assert pair.get_reserves() == (1_000_000, 4_000_000, T0)

    def test_emits_sync_then_mint(self, pair):
        provide(pair, ALICE, 1_000_000, 4_000_000)
        assert pair.events == [
            Sync(reserve_a=1_000_000, reserve_b=4_000_000),
            Mint(sender=ALICE, amount_a=1_000_000, amount_b=4_000_000),
        ]

    def test_too_small_reverts_everything(self, pair):
        """A failed mint leaves balances, supply, reserves and events as they were."""
        with pytest.raises(InsufficientLiquidityMinted):
            provide(pair, ALICE, 1_000, 1_000)

        assert pair.token_a.balance_of(ALICE) == 1_000
        assert pair.token_b.balance_of(ALICE) == 1_000
        assert pair.token_a.balance_of(pair.address) == 0
        assert pair.total_supply() == 0
        assert pair.get_reserves() == (0, 0, 0)
        assert pair.events == []

    def test_without_approval_fails(self, pair):
        fund(pair.token_a, ALICE, 1_000_000)
        fund(pair.token_b, ALICE, 4_000_000)
        with pytest.raises(TransferFailed):
            pair.mint(ALICE, 1_000_000, 4_000_000)

    def test_recipient(self, pair):
        fund(pair.token_a, ALICE, 1_000_000, pair.address)
        fund(pair.token_b, ALICE, 4_000_000, pair.address)
        pair.mint(ALICE, 1_000_000, 4_000_000, to=CAROL)
        assert pair.ledger.balance_of(CAROL) == 1_999_000
        assert pair.ledger.balance_of(ALICE) == 0


class TestLaterDeposits:
    def test_proportional(self, seeded_pair):
        result = provide(seeded_pair, BOB, 1_000, 4_000)
        assert result.liquidity == 2_000
        assert seeded_pair.total_supply() == 2_002_000

    def test_matches_reserve_ratio(self, seeded_pair):
        """Only the ratio-matching amount is pulled from the depositor."""
        fund(seeded_pair.token_a, BOB, 1_000, seeded_pair.address)
        fund(seeded_pair.token_b, BOB, 5_000, seeded_pair.address)
        result = seeded_pair.mint(BOB, 1_000, 5_000)
        assert (result.amount_a, result.amount_b) == (1_000, 4_000)
        assert seeded_pair.token_b.balance_of(BOB) == 1_000

    def test_minimum_enforced(self, seeded_pair):
        fund(seeded_pair.token_a, BOB, 1_000, seeded_pair.address)
        fund(seeded_pair.token_b, BOB, 5_000, seeded_pair.address)
        with pytest.raises(InsufficientInputAmount):
            seeded_pair.mint(BOB, 1_000, 5_000, amount_b_min=4_500)
        assert seeded_pair.token_b.balance_of(BOB) == 5_000


class TestBurn:
    def test_pro_rata_payout(self, seeded_pair):
        result = seeded_pair.burn(ALICE, 1_999_000)

        assert (result.amount_a, result.amount_b) == (999_500, 3_998_000)
        assert seeded_pair.token_a.balance_of(ALICE) == 999_500
        assert seeded_pair.token_b.balance_of(ALICE) == 3_998_000
        assert seeded_pair.get_reserves()[:2] == (500, 2_000)
        assert seeded_pair.total_supply() == 1_000
        assert seeded_pair.events[-1] == Burn(
            sender=ALICE, amount_a=999_500, amount_b=3_998_000, to=ALICE
        )

    def test_round_trip_loses_only_locked_share(self, pair):
        provide(pair, ALICE, 1_000_000, 4_000_000)
        pair.burn(ALICE, pair.ledger.balance_of(ALICE))
        assert pair.token_a.balance_of(ALICE) == 1_000_000 - 500
        assert pair.token_b.balance_of(ALICE) == 4_000_000 - 2_000

    def test_recipient(self, seeded_pair):
        seeded_pair.burn(ALICE, 1_000, to=BOB)
        assert seeded_pair.token_a.balance_of(BOB) == 500
        assert seeded_pair.token_b.balance_of(BOB) == 2_000

    def test_redeems_tokens_already_in_pair(self, seeded_pair):
        seeded_pair.ledger.transfer(ALICE, seeded_pair.address, 1_000)
        result = seeded_pair.burn(ALICE, 998_000)
        assert result.liquidity == 999_000

    def test_more_than_held_fails(self, seeded_pair):
        with pytest.raises(TransferFailed):
            seeded_pair.burn(BOB, 1)
        assert seeded_pair.total_supply() == 2_000_000

    def test_nothing_burned_fails(self, seeded_pair):
        with pytest.raises(InsufficientLiquidityBurned):
            seeded_pair.burn(ALICE, 0)

    def test_burn_on_empty_pair_fails(self, pair):
        """No supply yet: reverts with the burn error, not an arithmetic one."""
        with pytest.raises(InsufficientLiquidityBurned):
            pair.burn(ALICE, 0)
        assert pair.events == []

    def test_minimum_enforced(self, seeded_pair):
        with pytest.raises(InsufficientOutputAmount):
            seeded_pair.burn(ALICE, 1_999_000, amount_a_min=999_501)
        assert seeded_pair.ledger.balance_of(ALICE) == 1_999_000
        assert seeded_pair.get_reserves()[:2] == (1_000_000, 4_000_000)


class TestSyncAndSkim:
    def test_sync_absorbs_donation(self, seeded_pair):
        seeded_pair.token_a.mint(seeded_pair.address, 500)
        assert seeded_pair.sync() == (1_000_500, 4_000_000)
        assert seeded_pair.events[-1] == Sync(reserve_a=1_000_500, reserve_b=4_000_000)

    def test_sync_is_idempotent(self, seeded_pair):
        first = seeded_pair.sync()
        assert seeded_pair.sync() == first == (1_000_000, 4_000_000)

    def test_sync_overflow_reverts(self, seeded_pair):
        seeded_pair.token_a.mint(seeded_pair.address, UINT112_MAX)
        events = list(seeded_pair.events)
        with pytest.raises(Overflow):
            seeded_pair.sync()
        assert seeded_pair.get_reserves()[:2] == (1_000_000, 4_000_000)
        assert seeded_pair.events == events

    def test_skim_sends_excess(self, seeded_pair):
        seeded_pair.token_a.mint(seeded_pair.address, 500)
        assert seeded_pair.skim(BOB) == (500, 0)
        assert seeded_pair.token_a.balance_of(BOB) == 500
        assert seeded_pair.get_reserves()[:2] == (1_000_000, 4_000_000)
        assert seeded_pair.events[-1] == Skim(to=BOB, amount_a=500, amount_b=0)

    def test_skim_without_excess(self, seeded_pair):
        assert seeded_pair.skim(BOB) == (0, 0)


class TestAccumulators:
    def test_advance_on_update(self, seeded_pair, clock):
        clock.advance(10)
        seeded_pair.sync()
        assert seeded_pair.price_a_cumulative_last == 40 * Q112
        assert seeded_pair.price_b_cumulative_last == 10 * (Q112 // 4)
        assert seeded_pair.get_reserves()[2] == T0 + 10

    def test_no_advance_within_same_second(self, seeded_pair):
        seeded_pair.sync()
        assert seeded_pair.price_a_cumulative_last == 0


class TestProtocolFee:
    """One sixth of sqrt(k) growth goes to fee_to when it is set."""

    def test_fee_minted_on_next_liquidity_event(self, factory, pair):
        factory.set_fee_to(SETTER, FEE_SINK)
        provide(pair, ALICE, 1_000_000, 4_000_000)
        assert pair.k_last == 4 * 10**12

        fund(pair.token_a, BOB, 10_000, pair.address)
        pair.swap(BOB, pair.token_a.address, 10_000, 1)
        reserve_a, reserve_b, _ = pair.get_reserves()
        expected = protocol_fee_liquidity(pair.total_supply(), reserve_a * reserve_b, 4 * 10**12)
        assert expected > 0

        pair.burn(ALICE, 1_000)
        assert pair.ledger.balance_of(FEE_SINK) == expected
        reserve_a, reserve_b, _ = pair.get_reserves()
        assert pair.k_last == reserve_a * reserve_b

    def test_fee_off_keeps_k_last_zero(self, seeded_pair):
        assert seeded_pair.k_last == 0
        provide(seeded_pair, BOB, 1_000, 4_000)
        assert seeded_pair.k_last == 0

    def test_turning_fee_off_clears_k_last(self, factory, pair):
        factory.set_fee_to(SETTER, FEE_SINK)
        provide(pair, ALICE, 1_000_000, 4_000_000)
        factory.set_fee_to(SETTER, None)
        provide(pair, BOB, 1_000, 4_000)
        assert pair.k_last == 0
        assert pair.ledger.balance_of(FEE_SINK) == 0
