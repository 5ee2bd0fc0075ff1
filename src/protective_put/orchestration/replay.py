"""
Scenario Replay

In-process host for driving the hedge engine from a YAML scenario, used for
demos and integration tests.

Key patterns:
- ScenarioHost implements HedgeHost over in-memory chains and holdings
- Option chains only become visible after the engine requests them
- Adjustments fill perfectly at the next step (holdings set to the target)

Scenario format:
    name: drawdown_demo
    steps:
      - timestamp: 2024-01-02T16:00:00
        total_value: 1000000
        positions:
          - {symbol: SPY, quantity: 1000, price: 100}
        chains:
          SPY:
            - {symbol: SPY240302P90, right: put, strike: 90, expiry: 2024-03-02,
               bid: 1.00, ask: 1.04, volume: 1200}

A step without `chains` keeps the chains of the previous step.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from loguru import logger

from protective_put.config.hedge_config import HedgeConfig
from protective_put.decisions.hedge_engine import HedgeDecisionEngine, HedgeObserver
from protective_put.decisions.models import TargetAdjustment
from protective_put.models.market_models import OptionContract, PortfolioSnapshot

logger = logger.bind(component="Replay")


class ScenarioHost:
    """
    In-memory HedgeHost.

    A contract is tracked while it is in a current chain or held. Holdings of
    untracked contracts read as None, tracked but unheld ones as 0.
    """

    def __init__(self, chains: Optional[Dict[str, Sequence[OptionContract]]] = None):
        self.chains: Dict[str, List[OptionContract]] = {}
        self.holdings: Dict[str, int] = {}
        self.subscriptions: List[str] = []
        if chains:
            self.set_chains(chains)

    def set_chains(self, chains: Dict[str, Sequence[OptionContract]]) -> None:
        self.chains = {underlying: list(contracts) for underlying, contracts in chains.items()}

    def option_chain(self, underlying: str) -> Optional[Sequence[OptionContract]]:
        if underlying not in self.subscriptions:
            return None
        return self.chains.get(underlying)

    def request_option_data(self, underlying: str) -> None:
        if underlying not in self.subscriptions:
            self.subscriptions.append(underlying)
            logger.debug(f"Subscribed to option data for {underlying}")

    def holding_quantity(self, contract_symbol: str) -> Optional[int]:
        if contract_symbol in self.holdings:
            return self.holdings[contract_symbol]
        for contracts in self.chains.values():
            if any(c.symbol == contract_symbol for c in contracts):
                return 0
        return None

    def apply(self, adjustments: Sequence[TargetAdjustment]) -> None:
        """Fill adjustments in order; quantity 0 removes the holding."""
        for adjustment in adjustments:
            if adjustment.is_close:
                self.holdings.pop(adjustment.symbol, None)
            else:
                self.holdings[adjustment.symbol] = adjustment.quantity

    def __repr__(self) -> str:
        return f"ScenarioHost(subscriptions={self.subscriptions}, holdings={self.holdings})"


@dataclass(slots=True)
class ScenarioStep:
    """One scheduling tick: a snapshot plus (optionally) new chains."""

    snapshot: PortfolioSnapshot
    chains: Optional[Dict[str, List[OptionContract]]] = None


@dataclass(slots=True)
class Scenario:
    name: str
    steps: List[ScenarioStep] = field(default_factory=list)


@dataclass(slots=True)
class ReplayStep:
    """
    Result of replaying one step.

    Attributes:
        index: Step position in the scenario
        timestamp: Snapshot time
        drawdown: Drawdown after the step
        adjustments: Adjustments the engine returned
        holdings: Host holdings after filling the adjustments
        hedges: Engine ledger after the step (underlying -> contract)
    """

    index: int
    timestamp: datetime
    drawdown: Decimal
    adjustments: List[TargetAdjustment]
    holdings: Dict[str, int]
    hedges: Dict[str, str]


def _parse_chains(raw: Dict[str, Any]) -> Dict[str, List[OptionContract]]:
    chains: Dict[str, List[OptionContract]] = {}
    for underlying, contracts in (raw or {}).items():
        chains[underlying] = [
            OptionContract(**{"underlying": underlying, **contract}) for contract in contracts or []
        ]
    return chains


def parse_scenario(data: Dict[str, Any], name: str = "scenario") -> Scenario:
    """
    Build a Scenario from parsed YAML.

    Raises:
        ValueError: If there are no steps or a step fails validation
    """
    raw_steps = data.get("steps") or []
    if not raw_steps:
        raise ValueError(f"Scenario {name!r} has no steps")

    steps = []
    for i, raw in enumerate(raw_steps):
        try:
            snapshot = PortfolioSnapshot(
                timestamp=raw["timestamp"],
                total_value=raw["total_value"],
                positions=raw.get("positions") or [],
            )
            chains = _parse_chains(raw["chains"]) if "chains" in raw else None
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid step {i} in scenario {name!r}: {e}") from e
        steps.append(ScenarioStep(snapshot=snapshot, chains=chains))

    return Scenario(name=data.get("name", name), steps=steps)


def load_scenario(path: str | Path) -> Scenario:
    """
    Load a scenario YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the scenario is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    scenario = parse_scenario(data, name=path.stem)
    logger.info(f"Loaded scenario {scenario.name!r} with {len(scenario.steps)} steps from {path}")
    return scenario


def run_replay(
    scenario: Scenario,
    config: Optional[HedgeConfig] = None,
    observers: Optional[List[HedgeObserver]] = None,
    host: Optional[ScenarioHost] = None,
) -> List[ReplayStep]:
    """
    Replay a scenario through a fresh engine.

    Args:
        scenario: Scenario to replay
        config: Hedge configuration (defaults if None)
        observers: Event observers attached to the engine
        host: Host to drive (fresh ScenarioHost if None)

    Returns:
        One ReplayStep per scenario step
    """
    engine = HedgeDecisionEngine(config or HedgeConfig(), observers=observers)
    host = host or ScenarioHost()
    results: List[ReplayStep] = []

    for index, step in enumerate(scenario.steps):
        if step.chains is not None:
            host.set_chains(step.chains)

        adjustments = engine.evaluate(step.snapshot, host)
        host.apply(adjustments)

        results.append(ReplayStep(
            index=index,
            timestamp=step.snapshot.timestamp,
            drawdown=engine.state.drawdown.current_drawdown,
            adjustments=adjustments,
            holdings=dict(host.holdings),
            hedges=engine.hedges,
        ))

    logger.info(
        f"Replayed {len(results)} steps of {scenario.name!r}: "
        f"{sum(len(r.adjustments) for r in results)} adjustments"
    )
    return results
