"""
Data Models Package

Pydantic models for host-supplied market data and the host protocol.

EngineState lives in protective_put.models.internal_state and is imported
from there directly.
"""

from protective_put.models.host import HedgeHost
from protective_put.models.market_models import (
    EquityPosition,
    OptionContract,
    OptionRight,
    PortfolioSnapshot,
    SecurityType,
    to_decimal,
)

__all__ = [
    # Market data
    "EquityPosition",
    "OptionContract",
    "PortfolioSnapshot",
    "OptionRight",
    "SecurityType",
    "to_decimal",
    # Host
    "HedgeHost",
]
