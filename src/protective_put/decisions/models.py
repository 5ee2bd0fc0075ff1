"""
Hedge Decision Data Models and Enums

This module provides data models for the hedge decision engine output and its
structured event side channel.
Uses dataclasses with slots=True for performance (internal data, validated on entry).

Decision tree:
    Is this data internal to my process?
    ├─ Yes → Use dataclass (performance matters) ← WE ARE HERE
    └─ No → Use Pydantic (validation critical)
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class AdjustmentReason(str, Enum):
    """Why a target adjustment was emitted."""

    OPEN = "open"  # New hedge opened
    RESIZE = "resize"  # Old contract closed before reopening at a new size/contract
    HEDGE_OFF = "hedge_off"  # Drawdown recovered, unwinding all hedges


@dataclass(slots=True)
class TargetAdjustment:
    """
    Target holding for one option contract.

    Attributes:
        symbol: Contract identifier
        quantity: Contracts to hold (0 = close the position)
        underlying: Underlying the contract protects (informational)
        reason: Why the adjustment was emitted (informational)

    Raises:
        ValueError: If symbol is empty or quantity is negative
    """

    symbol: str
    quantity: int
    underlying: Optional[str] = None
    reason: Optional[AdjustmentReason] = None

    def __post_init__(self):
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Adjustment symbol cannot be empty")
        if self.quantity < 0:
            raise ValueError(f"Adjustment quantity must be >= 0, got {self.quantity}")

    @property
    def is_close(self) -> bool:
        return self.quantity == 0

    def __repr__(self) -> str:
        return f"TargetAdjustment({self.symbol} → {self.quantity})"


class HedgeEventType(str, Enum):
    """Structured events emitted by the hedge engine."""

    HIGH_WATER_MARK = "high_water_mark"
    EVALUATION_THROTTLED = "evaluation_throttled"
    HEDGE_OFF = "hedge_off"
    SUBSCRIPTION_REQUESTED = "subscription_requested"
    CHAIN_UNAVAILABLE = "chain_unavailable"
    NO_CANDIDATE = "no_candidate"
    CONTRACT_UNAVAILABLE = "contract_unavailable"
    HEDGE_UNCHANGED = "hedge_unchanged"
    HEDGE_CLOSED = "hedge_closed"
    HEDGE_OPENED = "hedge_opened"
    ZERO_QUANTITY = "zero_quantity"
    EVALUATION_COMPLETE = "evaluation_complete"


@dataclass(slots=True)
class HedgeEvent:
    """
    Hedge engine event.

    Carries no decision logic; observers use it for auditing and monitoring.

    Attributes:
        event_type: Type of event
        timestamp: Host time of the evaluation that produced the event
        underlying: Underlying symbol (if the event concerns one)
        contract: Contract symbol (if the event concerns one)
        quantity: Contract quantity (opens, closes, unchanged hedges)
        drawdown: Portfolio drawdown at the time of the event
        metadata: Event-specific data
    """

    event_type: HedgeEventType
    timestamp: datetime
    underlying: Optional[str] = None
    contract: Optional[str] = None
    quantity: Optional[int] = None
    drawdown: Optional[Decimal] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dictionary for tabular storage."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "underlying": self.underlying,
            "contract": self.contract,
            "quantity": self.quantity,
            "drawdown": float(self.drawdown) if self.drawdown is not None else None,
            "metadata": self.metadata,
        }
