"""
Decision Engine Package

This package provides the protective put decision engine.

Key exports:
- HedgeDecisionEngine: Engine class owning its state
- evaluate: Plain function form with explicit state
- TargetAdjustment, HedgeEvent, HedgeEventType: Data models
- HedgeObserver: Protocol for event observers
"""

from protective_put.decisions.models import (
    AdjustmentReason,
    HedgeEvent,
    HedgeEventType,
    TargetAdjustment,
)
from protective_put.decisions.hedge_engine import HedgeDecisionEngine, HedgeObserver, evaluate

__all__ = [
    "HedgeDecisionEngine",
    "HedgeObserver",
    "evaluate",
    "TargetAdjustment",
    "AdjustmentReason",
    "HedgeEvent",
    "HedgeEventType",
]
