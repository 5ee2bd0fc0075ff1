"""
Pydantic Models for Host Market Data Validation

This module provides Pydantic models for validating the portfolio snapshot and
option catalog handed to the hedge engine by the host runtime.
Pydantic is used here (instead of dataclasses) because this data is external and
can be malformed. Validation ensures data integrity before it enters the engine.

Key patterns:
- Field constraints: ge/gt for prices, min_length for identifiers
- Decimal for every monetary field (exact boundary comparisons)
- frozen=True: Inputs are read-only for the duration of an evaluation

Decision tree (from research):
    Does this data come from outside my process?
    ├─ Yes → Use Pydantic (validation critical) ← WE ARE HERE
    └─ No → Use dataclass (performance matters)
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def to_decimal(value) -> Decimal:
    """Convert a number to Decimal through its string form (0.95 -> Decimal('0.95'))."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class SecurityType(str, Enum):
    """Security type enum."""

    EQUITY = "equity"
    OPTION = "option"
    FUTURE = "future"
    FOREX = "forex"
    CRYPTO = "crypto"
    INDEX = "index"


class OptionRight(str, Enum):
    """Option type enum."""

    CALL = "call"
    PUT = "put"


class EquityPosition(BaseModel):
    """
    Portfolio holding as reported by the host.

    Only positions with security_type=equity and nonzero quantity are hedged.

    Attributes:
        symbol: Holding identifier (e.g., "AAPL")
        quantity: Signed share quantity (negative for short)
        price: Current market price per share
        security_type: Security type tag
    """

    symbol: str = Field(..., min_length=1)
    quantity: int
    price: Decimal = Field(..., ge=0, description="Current market price")
    security_type: SecurityType = SecurityType.EQUITY

    @field_validator("price", mode="before")
    def coerce_price(cls, v):
        """Convert float prices through str to avoid binary artifacts."""
        return to_decimal(v) if isinstance(v, float) else v

    @property
    def is_hedgeable(self) -> bool:
        """True for equity positions with nonzero quantity."""
        return self.security_type == SecurityType.EQUITY and self.quantity != 0

    class Config:
        frozen = True


class OptionContract(BaseModel):
    """
    Option contract from the host catalog.

    Market data fields (bid, ask, volume) are optional because the host may list
    a contract before any quote has arrived. A contract whose market data is
    incomplete is not resolvable and is never selected.

    Attributes:
        symbol: Contract identifier (e.g., "AAPL 240315P00090000")
        underlying: Underlying symbol
        right: Option type (CALL or PUT)
        strike: Strike price
        expiry: Expiration date
        bid: Best bid (None if no quote)
        ask: Best ask (None if no quote)
        volume: Traded volume (None if unknown)
    """

    symbol: str = Field(..., min_length=1)
    underlying: str = Field(..., min_length=1)
    right: OptionRight
    strike: Decimal = Field(..., gt=0, description="Strike price")
    expiry: date = Field(..., description="Expiration date")
    bid: Optional[Decimal] = Field(default=None, ge=0)
    ask: Optional[Decimal] = Field(default=None, ge=0)
    volume: Optional[int] = Field(default=None, ge=0)

    @field_validator("strike", "bid", "ask", mode="before")
    def coerce_prices(cls, v):
        """Convert float prices through str to avoid binary artifacts."""
        return to_decimal(v) if isinstance(v, float) else v

    @property
    def is_put(self) -> bool:
        return self.right == OptionRight.PUT

    @property
    def has_market_data(self) -> bool:
        """True when bid, ask and volume are all known."""
        return self.bid is not None and self.ask is not None and self.volume is not None

    @property
    def spread_fraction(self) -> Optional[Decimal]:
        """
        Bid-ask spread as a fraction of the ask.

        Returns:
            (ask - bid) / ask, or None if market data is missing or ask is zero
        """
        if not self.has_market_data or self.ask <= 0:
            return None
        return (self.ask - self.bid) / self.ask

    class Config:
        frozen = True


class PortfolioSnapshot(BaseModel):
    """
    Portfolio state at one evaluation tick.

    Attributes:
        timestamp: Host wall-clock time of the evaluation
        total_value: Total portfolio value
        positions: All holdings (equities and anything else the host reports)
    """

    timestamp: datetime
    total_value: Decimal = Field(..., ge=0, description="Total portfolio value")
    positions: List[EquityPosition] = Field(default_factory=list)

    @field_validator("total_value", mode="before")
    def coerce_total_value(cls, v):
        return to_decimal(v) if isinstance(v, float) else v

    def hedgeable_positions(self) -> List[EquityPosition]:
        """Equity positions with nonzero quantity, in snapshot order."""
        return [p for p in self.positions if p.is_hedgeable]

    class Config:
        frozen = True
