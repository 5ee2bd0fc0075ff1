"""
Tests for Protective Put Contract Filter

Tests windowing, ranking, liquidity and the config-bound ContractFilter.
"""

import random
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from protective_put.config.hedge_config import HedgeConfig
from protective_put.strategy_builder.contract_filter import (
    ContractFilter,
    filter_candidates,
    is_liquid,
    select_put_contract,
)
from tests.fixtures.market_fixtures import MAX_EXPIRY, NOW, TARGET_EXPIRY, make_put


def select(catalog, **overrides):
    """select_put_contract with the default window around strike 90."""
    params = dict(
        target_strike=Decimal("90"),
        target_expiry=TARGET_EXPIRY,
        min_expiry=TARGET_EXPIRY,
        max_expiry=MAX_EXPIRY,
        min_volume=500,
        max_spread_fraction=Decimal("0.05"),
    )
    params.update(overrides)
    return select_put_contract(catalog, **params)


# ============================================================================
# Liquidity
# ============================================================================


class TestIsLiquid:
    """Tests for the liquidity predicate."""

    def test_liquid_contract(self):
        contract = make_put("SPY", 90, TARGET_EXPIRY, bid=1.00, ask=1.04, volume=1000)

        assert is_liquid(contract, 500, Decimal("0.05")) is True

    def test_volume_boundary_inclusive(self):
        """Test volume exactly at the minimum passes."""
        contract = make_put("SPY", 90, TARGET_EXPIRY, volume=500)

        assert is_liquid(contract, 500, Decimal("0.05")) is True
        assert is_liquid(make_put("SPY", 90, TARGET_EXPIRY, volume=499), 500, Decimal("0.05")) is False

    def test_spread_boundary_inclusive(self):
        """Test a spread of exactly 5% passes (exact decimal comparison)."""
        contract = make_put("SPY", 90, TARGET_EXPIRY, bid=0.95, ask=1.00)

        assert contract.spread_fraction == Decimal("0.05")
        assert is_liquid(contract, 500, 0.05) is True

    def test_wide_spread_rejected(self):
        contract = make_put("SPY", 90, TARGET_EXPIRY, bid=0.94, ask=1.00)

        assert is_liquid(contract, 500, Decimal("0.05")) is False

    def test_zero_ask_never_liquid(self):
        """Test zero ask is guarded instead of dividing by zero."""
        contract = make_put("SPY", 90, TARGET_EXPIRY, bid=0, ask=0)

        assert contract.spread_fraction is None
        assert is_liquid(contract, 500, Decimal("0.05")) is False

    def test_missing_market_data_never_liquid(self):
        contract = make_put("SPY", 90, TARGET_EXPIRY, volume=None)

        assert is_liquid(contract, 0, Decimal("1")) is False


# ============================================================================
# Window and ranking
# ============================================================================


class TestFilterCandidates:
    """Tests for windowing and ranking."""

    def test_expiry_distance_wins_before_strike_distance(self, spy_chain):
        """Test the 88 strike one day out beats the 90 strike five days out."""
        ranked = filter_candidates(spy_chain, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY)

        assert [(c.strike, c.expiry) for c in ranked] == [
            (Decimal("88"), TARGET_EXPIRY + timedelta(days=1)),
            (Decimal("93"), TARGET_EXPIRY + timedelta(days=1)),
            (Decimal("90"), TARGET_EXPIRY + timedelta(days=5)),
        ]

    def test_window_edges_inclusive(self):
        """Test both expiry ends and both strike band ends are inclusive."""
        catalog = [
            make_put("SPY", 90, TARGET_EXPIRY),
            make_put("SPY", 90, MAX_EXPIRY),
            make_put("SPY", Decimal("85.5"), TARGET_EXPIRY),
            make_put("SPY", Decimal("94.5"), TARGET_EXPIRY),
        ]

        ranked = filter_candidates(catalog, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY)

        assert len(ranked) == 4

    def test_outside_window_dropped(self):
        catalog = [
            make_put("SPY", 90, TARGET_EXPIRY - timedelta(days=1)),
            make_put("SPY", 90, MAX_EXPIRY + timedelta(days=1)),
            make_put("SPY", Decimal("85.49"), TARGET_EXPIRY),
            make_put("SPY", Decimal("94.51"), TARGET_EXPIRY),
        ]

        assert filter_candidates(catalog, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY) == []

    def test_calls_and_unquoted_contracts_dropped(self, spy_chain):
        """Test only puts with resolvable market data are kept."""
        catalog = [
            make_put("SPY", 90, TARGET_EXPIRY, bid=None),
            make_put("SPY", 90, TARGET_EXPIRY + timedelta(days=2), volume=None),
        ]

        assert filter_candidates(catalog, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY) == []
        assert all(c.is_put for c in filter_candidates(
            spy_chain, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY
        ))

    def test_symbol_breaks_full_ties(self):
        """Test identical distances fall back to the contract symbol."""
        catalog = [
            make_put("SPY", 90, TARGET_EXPIRY, symbol="SPY-B"),
            make_put("SPY", 90, TARGET_EXPIRY, symbol="SPY-A"),
        ]

        ranked = filter_candidates(catalog, Decimal("90"), TARGET_EXPIRY, TARGET_EXPIRY, MAX_EXPIRY)

        assert [c.symbol for c in ranked] == ["SPY-A", "SPY-B"]


# ============================================================================
# Selection
# ============================================================================


class TestSelectPutContract:
    """Tests for select_put_contract."""

    def test_selects_nearest_expiry_then_strike(self, spy_chain):
        selected = select(spy_chain)

        assert selected.strike == Decimal("88")
        assert selected.expiry == TARGET_EXPIRY + timedelta(days=1)

    def test_illiquid_best_is_dropped_not_reranked(self, spy_chain):
        """Test the next-ranked liquid contract wins when the best is illiquid."""
        catalog = [c for c in spy_chain if c.strike != Decimal("88")]
        catalog.append(make_put("SPY", 88, TARGET_EXPIRY + timedelta(days=1), volume=10))

        selected = select(catalog)

        assert selected.strike == Decimal("93")

    def test_no_candidate(self):
        """Test an empty result is None, not an error."""
        assert select([]) is None
        assert select([make_put("SPY", 90, TARGET_EXPIRY, volume=1)]) is None

    def test_deterministic_regardless_of_catalog_order(self, spy_chain):
        """Test shuffled catalogs select the same contract."""
        expected = select(spy_chain).symbol
        rng = random.Random(7)

        for _ in range(20):
            shuffled = list(spy_chain)
            rng.shuffle(shuffled)
            assert select(shuffled).symbol == expected

    def test_custom_strike_tolerance(self, spy_chain):
        """Test a tighter band drops the 88 and 93 strikes."""
        selected = select(spy_chain, strike_tolerance=Decimal("0.01"))

        assert selected.strike == Decimal("90")
        assert selected.expiry == TARGET_EXPIRY + timedelta(days=5)


# ============================================================================
# Config-bound filter
# ============================================================================


class TestContractFilter:
    """Tests for ContractFilter."""

    def test_target_strike(self):
        contract_filter = ContractFilter(HedgeConfig())

        assert contract_filter.target_strike(Decimal("100")) == Decimal("90.00")
        assert contract_filter.target_strike(100.0) == Decimal("90.00")

    def test_expiry_window(self):
        """Test window is computed on calendar dates from the evaluation time."""
        contract_filter = ContractFilter(HedgeConfig())

        target, low, high = contract_filter.expiry_window(NOW)

        assert target == TARGET_EXPIRY
        assert low == TARGET_EXPIRY
        assert high == MAX_EXPIRY

    def test_expiry_window_ignores_time_of_day(self):
        contract_filter = ContractFilter(HedgeConfig())

        assert contract_filter.expiry_window(datetime(2024, 1, 2, 0, 1)) == contract_filter.expiry_window(
            datetime(2024, 1, 2, 23, 59)
        )

    def test_expiry_on_window_start_selected_during_trading_day(self):
        """
        Test an expiry exactly min_days out is eligible at 16:00.

        The window is compared on dates; a datetime comparison (now + 60 days
        at 16:00 against a midnight expiry) would exclude this contract.
        """
        contract_filter = ContractFilter(HedgeConfig())
        on_start = make_put("SPY", 90, TARGET_EXPIRY)

        assert NOW.hour == 16
        assert contract_filter.select_for([on_start], Decimal("100"), NOW) == on_start

    def test_select_for(self, spy_chain):
        """Test price 100 with strike pct 0.90 picks the 88 strike one day past target."""
        contract_filter = ContractFilter(HedgeConfig())

        selected = contract_filter.select_for(spy_chain, Decimal("100"), NOW)

        assert selected.strike == Decimal("88")
        assert selected.expiry == date(2024, 3, 3)

    def test_select_for_respects_config(self, spy_chain):
        """Test config liquidity limits are applied."""
        contract_filter = ContractFilter(HedgeConfig(min_option_volume=5000))

        assert contract_filter.select_for(spy_chain, Decimal("100"), NOW) is None

    def test_candidates_and_select_agree(self, spy_chain):
        contract_filter = ContractFilter(HedgeConfig())
        target, low, high = contract_filter.expiry_window(NOW)

        ranked = contract_filter.candidates(spy_chain, Decimal("90"), target, low, high)
        selected = contract_filter.select(spy_chain, Decimal("90"), target, low, high)

        assert selected == next(c for c in ranked if contract_filter.is_liquid(c))

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("1")])
    def test_no_puts_near_tiny_target(self, spy_chain, price):
        contract_filter = ContractFilter(HedgeConfig())

        assert contract_filter.select_for(spy_chain, price, NOW) is None
