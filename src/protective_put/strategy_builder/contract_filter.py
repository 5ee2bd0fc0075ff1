"""
Protective Put Contract Filter

Picks the put contract to hold against one underlying from a noisy option catalog.

Selection stages:
1. Window: puts with expiry in [min_expiry, max_expiry], strike within
   ±strike_tolerance of the target strike, and resolvable market data
2. Rank: nearest expiry to the target expiry first, nearest strike second
3. Liquidity: volume >= min_volume, ask > 0, spread fraction <= max spread.
   Illiquid contracts are dropped, never re-ranked
4. First survivor wins; an empty result just means "no hedge this round"

Tenor closeness dominates the ranking because tenor drives the cost decay of the
hedge, while strike only sets the protection level.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from protective_put.config.hedge_config import HedgeConfig
from protective_put.models.market_models import OptionContract, to_decimal

logger = logger.bind(component="ContractFilter")


def rank_key(contract: OptionContract, target_strike: Decimal, target_expiry: date):
    """Sort key: (expiry distance in days, strike distance, symbol)."""
    return (
        abs((contract.expiry - target_expiry).days),
        abs(contract.strike - target_strike),
        contract.symbol,
    )


def is_liquid(contract: OptionContract, min_volume: int, max_spread_fraction) -> bool:
    """
    Liquidity predicate.

    Args:
        contract: Contract with resolvable market data
        min_volume: Minimum traded volume
        max_spread_fraction: Maximum (ask - bid) / ask

    Returns:
        True if the contract passes every liquidity clause
    """
    if not contract.has_market_data:
        return False
    if contract.volume < min_volume:
        return False
    # Zero ask: no spread to compute, never liquid
    if contract.ask <= 0:
        return False
    return contract.spread_fraction <= to_decimal(max_spread_fraction)


def filter_candidates(
    catalog: Iterable[OptionContract],
    target_strike,
    target_expiry: date,
    min_expiry: date,
    max_expiry: date,
    strike_tolerance=Decimal("0.05"),
) -> List[OptionContract]:
    """
    Window and rank the catalog (stages 1 and 2).

    Returns:
        Puts inside the tenor and strike window with resolvable market data,
        ordered by expiry distance, then strike distance
    """
    target_strike = to_decimal(target_strike)
    tolerance = to_decimal(strike_tolerance)
    low_strike = target_strike * (1 - tolerance)
    high_strike = target_strike * (1 + tolerance)

    puts = [
        c
        for c in catalog
        if c.is_put
        and min_expiry <= c.expiry <= max_expiry
        and low_strike <= c.strike <= high_strike
        and c.has_market_data
    ]
    puts.sort(key=lambda c: rank_key(c, target_strike, target_expiry))
    return puts


def select_put_contract(
    catalog: Iterable[OptionContract],
    target_strike,
    target_expiry: date,
    min_expiry: date,
    max_expiry: date,
    min_volume: int,
    max_spread_fraction,
    strike_tolerance=Decimal("0.05"),
) -> Optional[OptionContract]:
    """
    Select the best protective put from a catalog.

    Args:
        catalog: Option contracts for one underlying
        target_strike: Desired strike
        target_expiry: Desired expiry
        min_expiry: Earliest accepted expiry (inclusive)
        max_expiry: Latest accepted expiry (inclusive)
        min_volume: Minimum traded volume
        max_spread_fraction: Maximum bid-ask spread as a fraction of ask
        strike_tolerance: Accepted band around target_strike (0.05 = ±5%)

    Returns:
        Selected contract, or None if nothing survives filtering
    """
    ranked = filter_candidates(
        catalog, target_strike, target_expiry, min_expiry, max_expiry, strike_tolerance
    )
    for contract in ranked:
        if is_liquid(contract, min_volume, max_spread_fraction):
            return contract
    return None


class ContractFilter:
    """
    Contract filter bound to a HedgeConfig.

    Derives the strike target and the tenor window from the config and an
    evaluation time, then runs the selection stages.

    Example:
        >>> contract_filter = ContractFilter(HedgeConfig())
        >>> selected = contract_filter.select_for(
        ...     catalog=chain,
        ...     underlying_price=Decimal("100"),
        ...     now=datetime(2024, 1, 2, 16, 0),
        ... )
    """

    def __init__(self, config: HedgeConfig):
        self.config = config
        self.put_strike_percent = to_decimal(config.put_strike_percent)
        self.max_spread = to_decimal(config.max_bid_ask_spread)
        self.strike_tolerance = to_decimal(config.strike_tolerance)

    def target_strike(self, underlying_price) -> Decimal:
        return to_decimal(underlying_price) * self.put_strike_percent

    def expiry_window(self, now: datetime) -> tuple[date, date, date]:
        """
        Tenor window for an evaluation at `now`.

        Returns:
            (target_expiry, min_expiry, max_expiry). The target is the short end
            of the window.
        """
        today = now.date() if isinstance(now, datetime) else now
        min_expiry = today + timedelta(days=self.config.min_days_to_expiration)
        max_expiry = today + timedelta(days=self.config.max_days_to_expiration)
        return min_expiry, min_expiry, max_expiry

    def is_liquid(self, contract: OptionContract) -> bool:
        return is_liquid(contract, self.config.min_option_volume, self.max_spread)

    def candidates(
        self,
        catalog: Iterable[OptionContract],
        target_strike,
        target_expiry: date,
        min_expiry: date,
        max_expiry: date,
    ) -> List[OptionContract]:
        """Windowed and ranked puts, before the liquidity pass."""
        return filter_candidates(
            catalog, target_strike, target_expiry, min_expiry, max_expiry, self.strike_tolerance
        )

    def select(
        self,
        catalog: Iterable[OptionContract],
        target_strike,
        target_expiry: date,
        min_expiry: date,
        max_expiry: date,
    ) -> Optional[OptionContract]:
        """Run all selection stages with the configured liquidity limits."""
        return select_put_contract(
            catalog,
            target_strike,
            target_expiry,
            min_expiry,
            max_expiry,
            self.config.min_option_volume,
            self.max_spread,
            self.strike_tolerance,
        )

    def select_for(
        self,
        catalog: Sequence[OptionContract],
        underlying_price,
        now: datetime,
    ) -> Optional[OptionContract]:
        """
        Select the put to hold for an underlying trading at `underlying_price`.

        Args:
            catalog: Option chain for the underlying
            underlying_price: Current underlying price
            now: Evaluation time

        Returns:
            Selected contract or None
        """
        target_strike = self.target_strike(underlying_price)
        target_expiry, min_expiry, max_expiry = self.expiry_window(now)

        ranked = self.candidates(catalog, target_strike, target_expiry, min_expiry, max_expiry)
        logger.debug(
            f"Found {len(ranked)} puts matching criteria "
            f"(DTE: {self.config.min_days_to_expiration}-{self.config.max_days_to_expiration}, "
            f"Strike: {target_strike * (1 - self.strike_tolerance):.2f}-"
            f"{target_strike * (1 + self.strike_tolerance):.2f})"
        )
        if not ranked:
            return None

        liquid = [c for c in ranked if self.is_liquid(c)]
        logger.debug(
            f"Found {len(liquid)} liquid puts "
            f"(Min volume: {self.config.min_option_volume}, Max spread: {self.max_spread:.0%})"
        )
        if not liquid:
            return None

        selected = liquid[0]
        logger.info(
            f"Selected put: {selected.symbol}, strike={selected.strike}, "
            f"expiry={selected.expiry:%Y-%m-%d}, volume={selected.volume}, "
            f"bid={selected.bid}, ask={selected.ask}"
        )
        return selected
