"""
Risk Management Module

Portfolio-level state the hedge engine tracks between evaluations:
- Drawdown tracking against the high-water mark
- Rebalance throttling (minimum interval between evaluations)

Example:
    >>> from protective_put.risk_manager import DrawdownTracker
    >>> tracker = DrawdownTracker()
    >>> tracker.update(100_000)
    Decimal('0')
    >>> tracker.update(85_000)
    Decimal('-0.15')
"""

from protective_put.risk_manager.drawdown import DrawdownTracker
from protective_put.risk_manager.throttle import RebalanceThrottle

__all__ = [
    "DrawdownTracker",
    "RebalanceThrottle",
]
