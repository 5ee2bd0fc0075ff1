"""
Protective Put Hedge Engine

Decides, once per evaluation period, which protective puts to hold against
which equity positions and returns the target adjustments to get there.

Example:
    >>> from protective_put import HedgeConfig, HedgeDecisionEngine
    >>> engine = HedgeDecisionEngine(HedgeConfig())
    >>> adjustments = engine.evaluate(snapshot, host)
"""

from protective_put.config.hedge_config import HedgeConfig
from protective_put.decisions.hedge_engine import HedgeDecisionEngine, evaluate
from protective_put.decisions.models import TargetAdjustment
from protective_put.models.host import HedgeHost
from protective_put.models.market_models import EquityPosition, OptionContract, PortfolioSnapshot

__version__ = "0.1.0"

__all__ = [
    "HedgeConfig",
    "HedgeDecisionEngine",
    "evaluate",
    "TargetAdjustment",
    "HedgeHost",
    "EquityPosition",
    "OptionContract",
    "PortfolioSnapshot",
]
