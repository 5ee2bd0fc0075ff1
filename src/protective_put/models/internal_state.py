"""
Dataclasses for Hedge Engine State

All state the hedge engine carries from one evaluation to the next lives in
one EngineState object, owned by a single engine instance (or threaded
explicitly through `evaluate` by the caller). Nothing here is shared between
concurrent evaluations.

Decision tree (from research):
    Does this data come from outside my process?
    ├─ Yes → Use Pydantic (validation critical)
    └─ No → Use dataclass (performance matters) ← WE ARE HERE
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Set

from protective_put.data.hedge_ledger import HedgeLedger
from protective_put.risk_manager.drawdown import DrawdownTracker
from protective_put.risk_manager.throttle import RebalanceThrottle


@dataclass(slots=True)
class EngineState:
    """
    Persistent hedge engine state.

    Attributes:
        drawdown: High-water mark and drawdown tracker
        throttle: Minimum-interval evaluation gate (holds last evaluation time)
        ledger: Underlying -> held hedge contract
        subscribed_underlyings: Underlyings whose option data was requested from the host
    """

    drawdown: DrawdownTracker = field(default_factory=DrawdownTracker)
    throttle: RebalanceThrottle = field(default_factory=RebalanceThrottle)
    ledger: HedgeLedger = field(default_factory=HedgeLedger)
    subscribed_underlyings: Set[str] = field(default_factory=set)

    @classmethod
    def create(cls, minimum_interval: timedelta) -> "EngineState":
        """Fresh state with a throttle using `minimum_interval`."""
        return cls(throttle=RebalanceThrottle(minimum_interval=minimum_interval))

    def __repr__(self) -> str:
        return (
            f"EngineState(high={self.drawdown.high_water_mark:,.2f}, "
            f"last={self.throttle.last_evaluation}, "
            f"hedges={len(self.ledger)}, "
            f"subscribed={len(self.subscribed_underlyings)})"
        )
