"""
Portfolio Drawdown Tracker

Tracks the running high-water mark of total portfolio value and derives the
current drawdown from it. The hedge engine uses the drawdown both as the
hedge-on/hedge-off switch and to scale hedge size.

Drawdown is computed in Decimal so threshold comparisons are exact:
a portfolio at 88,000 after a 100,000 peak is exactly -0.12, not
-0.12000000000000000111.

Usage:
    >>> from protective_put.risk_manager import DrawdownTracker
    >>>
    >>> tracker = DrawdownTracker()
    >>> tracker.update(100_000)
    Decimal('0')
    >>> tracker.update(85_000)
    Decimal('-0.15')
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger

from protective_put.models.market_models import to_decimal

logger = logger.bind(component="DrawdownTracker")

ZERO = Decimal("0")


@dataclass(slots=True)
class DrawdownTracker:
    """
    High-water mark and drawdown tracker.

    **Lifecycle:**
    1. Start: high_water_mark is 0, drawdown is 0
    2. Update: high_water_mark = max(high_water_mark, value)
    3. Drawdown: value / high_water_mark - 1 (0 while high_water_mark is 0)

    Attributes:
        high_water_mark: Highest portfolio value observed (never decreases)
        current_drawdown: Drawdown computed by the last update (<= 0)
    """

    high_water_mark: Decimal = ZERO
    current_drawdown: Decimal = ZERO

    def update(self, current_value) -> Decimal:
        """
        Record the current portfolio value and return the drawdown.

        Args:
            current_value: Current total portfolio value

        Returns:
            Drawdown as a non-positive fraction (e.g., Decimal('-0.15'))

        Raises:
            ValueError: If current_value is negative
        """
        value = to_decimal(current_value)
        if value < 0:
            raise ValueError(f"portfolio value must be non-negative, got {value}")

        if value > self.high_water_mark:
            old_high = self.high_water_mark
            self.high_water_mark = value
            if old_high > 0:
                logger.info(f"New high water mark: {old_high:,.2f} → {value:,.2f}")
            else:
                logger.debug(f"High water mark initialized at {value:,.2f}")

        # Nothing positive observed yet
        if self.high_water_mark == 0:
            self.current_drawdown = ZERO
            return self.current_drawdown

        self.current_drawdown = value / self.high_water_mark - 1
        return self.current_drawdown

    def reset(self) -> None:
        """Forget the high-water mark (e.g., after a capital withdrawal)."""
        self.high_water_mark = ZERO
        self.current_drawdown = ZERO
        logger.debug("Drawdown tracker RESET")

    def __repr__(self) -> str:
        return (
            f"DrawdownTracker(high={self.high_water_mark:,.2f}, "
            f"drawdown={self.current_drawdown:.2%})"
        )
