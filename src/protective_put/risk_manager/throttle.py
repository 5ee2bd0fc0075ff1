"""
Rebalance Throttle

Gate that permits at most one full hedge re-evaluation per minimum interval
(one calendar day by default) to keep turnover down. A denied call changes no
state, so the hedge engine can return immediately without touching the ledger.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

logger = logger.bind(component="RebalanceThrottle")


@dataclass(slots=True)
class RebalanceThrottle:
    """
    Minimum-interval gate for hedge evaluations.

    Attributes:
        minimum_interval: Minimum time between two permitted evaluations
        last_evaluation: Time of the last permitted evaluation (None = never)
    """

    minimum_interval: timedelta = field(default_factory=lambda: timedelta(days=1))
    last_evaluation: Optional[datetime] = None

    def __post_init__(self):
        if self.minimum_interval < timedelta(0):
            raise ValueError(
                f"minimum_interval must be non-negative, got {self.minimum_interval}"
            )

    def should_run(self, now: datetime) -> bool:
        """
        Check whether a full evaluation may run at `now`.

        Returns False without any state change if less than minimum_interval has
        elapsed since the last permitted evaluation. Otherwise records `now` as
        the last evaluation and returns True.

        Args:
            now: Current host time

        Returns:
            True if the evaluation should proceed
        """
        if self.last_evaluation is not None and now - self.last_evaluation < self.minimum_interval:
            logger.debug(
                f"Skipping evaluation at {now:%Y-%m-%d %H:%M:%S}, "
                f"last evaluation was at {self.last_evaluation:%Y-%m-%d %H:%M:%S}"
            )
            return False

        self.last_evaluation = now
        return True

    def reset(self) -> None:
        """Allow the next call to run regardless of elapsed time."""
        self.last_evaluation = None
