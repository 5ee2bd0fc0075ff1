"""
Hedge Engine Configuration

Schema:
- hedge: Protective put sizing and contract selection parameters
- universe: Universe selection sizes and restricted list location
- runtime: Logging and audit trail settings

Config location: config/hedge_engine.yaml (see config/loader.py)
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional


def _interval_from_hours(value) -> timedelta:
    """Convert an hours value to a timedelta, rejecting non-numeric input."""
    if isinstance(value, bool):
        raise ValueError(f"minimum evaluation interval must be a number of hours, got {value!r}")
    try:
        return timedelta(hours=float(value))
    except (TypeError, ValueError):
        raise ValueError(f"minimum evaluation interval must be a number of hours, got {value!r}") from None


@dataclass(slots=True)
class HedgeConfig:
    """
    Protective put hedge configuration.

    Fixed at engine construction; not reloadable mid-run.

    Attributes:
        put_strike_percent: Target strike as a fraction of spot (default: 0.90)
        hedge_ratio: Fraction of the share position hedged at full scale (default: 0.05)
        drawdown_threshold: Drawdown at or below which hedging turns on (default: -0.12)
        min_days_to_expiration: Shortest accepted tenor, also the target tenor (default: 60)
        max_days_to_expiration: Longest accepted tenor (default: 90)
        min_option_volume: Minimum traded volume of a selected contract (default: 500)
        max_bid_ask_spread: Maximum (ask - bid) / ask of a selected contract (default: 0.05)
        minimum_evaluation_interval: Minimum time between full evaluations (default: 1 day)
        hedge_scale_drawdown_cap: Drawdown at which hedge size reaches full ratio (default: 0.20)
        strike_tolerance: Accepted strike band around the target strike (default: 0.05 = ±5%)
        optimal_quantity_tolerance: Contracts of drift still treated as already
            optimal (default: 0 = exact equality)
    """

    put_strike_percent: float = 0.90
    hedge_ratio: float = 0.05
    drawdown_threshold: float = -0.12
    min_days_to_expiration: int = 60
    max_days_to_expiration: int = 90
    min_option_volume: int = 500
    max_bid_ask_spread: float = 0.05
    minimum_evaluation_interval: timedelta = field(default_factory=lambda: timedelta(days=1))
    hedge_scale_drawdown_cap: float = 0.20
    strike_tolerance: float = 0.05
    optimal_quantity_tolerance: int = 0

    def __post_init__(self):
        """Validate hedge configuration."""
        errors = self.validate()
        if errors:
            raise ValueError("Invalid hedge config: " + "; ".join(errors))

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not (0 < self.put_strike_percent <= 2):
            errors.append(f"put_strike_percent must be in (0, 2]: {self.put_strike_percent}")
        if not (0 < self.hedge_ratio <= 1):
            errors.append(f"hedge_ratio must be in (0, 1]: {self.hedge_ratio}")
        if not (-1 < self.drawdown_threshold < 0):
            errors.append(f"drawdown_threshold must be in (-1, 0): {self.drawdown_threshold}")
        if self.min_days_to_expiration < 0:
            errors.append(f"min_days_to_expiration must be >= 0: {self.min_days_to_expiration}")
        if self.max_days_to_expiration < self.min_days_to_expiration:
            errors.append(
                f"max_days_to_expiration ({self.max_days_to_expiration}) must be >= "
                f"min_days_to_expiration ({self.min_days_to_expiration})"
            )
        if self.min_option_volume < 0:
            errors.append(f"min_option_volume must be >= 0: {self.min_option_volume}")
        if not (0 <= self.max_bid_ask_spread <= 1):
            errors.append(f"max_bid_ask_spread must be between 0 and 1: {self.max_bid_ask_spread}")
        if self.minimum_evaluation_interval < timedelta(0):
            errors.append(
                f"minimum_evaluation_interval must be non-negative: {self.minimum_evaluation_interval}"
            )
        if not (0 < self.hedge_scale_drawdown_cap <= 1):
            errors.append(
                f"hedge_scale_drawdown_cap must be in (0, 1]: {self.hedge_scale_drawdown_cap}"
            )
        if not (0 <= self.strike_tolerance < 1):
            errors.append(f"strike_tolerance must be in [0, 1): {self.strike_tolerance}")
        if self.optimal_quantity_tolerance < 0:
            errors.append(
                f"optimal_quantity_tolerance must be >= 0: {self.optimal_quantity_tolerance}"
            )

        return errors

    @classmethod
    def from_dict(cls, data: dict) -> "HedgeConfig":
        """
        Create config from dictionary.

        `minimum_evaluation_interval` may be given as a timedelta or a number
        of hours, or as `minimum_evaluation_interval_hours`. The hours key
        wins when both are present (it is the key environment overrides set).

        Raises:
            ValueError: If the interval is not a timedelta or a number
        """
        defaults = cls()
        if data.get("minimum_evaluation_interval_hours") is not None:
            interval = _interval_from_hours(data["minimum_evaluation_interval_hours"])
        else:
            interval = data.get("minimum_evaluation_interval")
            if interval is None:
                interval = defaults.minimum_evaluation_interval
            elif not isinstance(interval, timedelta):
                interval = _interval_from_hours(interval)

        return cls(
            put_strike_percent=float(data.get("put_strike_percent", defaults.put_strike_percent)),
            hedge_ratio=float(data.get("hedge_ratio", defaults.hedge_ratio)),
            drawdown_threshold=float(data.get("drawdown_threshold", defaults.drawdown_threshold)),
            min_days_to_expiration=int(
                data.get("min_days_to_expiration", defaults.min_days_to_expiration)
            ),
            max_days_to_expiration=int(
                data.get("max_days_to_expiration", defaults.max_days_to_expiration)
            ),
            min_option_volume=int(data.get("min_option_volume", defaults.min_option_volume)),
            max_bid_ask_spread=float(data.get("max_bid_ask_spread", defaults.max_bid_ask_spread)),
            minimum_evaluation_interval=interval,
            hedge_scale_drawdown_cap=float(
                data.get("hedge_scale_drawdown_cap", defaults.hedge_scale_drawdown_cap)
            ),
            strike_tolerance=float(data.get("strike_tolerance", defaults.strike_tolerance)),
            optimal_quantity_tolerance=int(
                data.get("optimal_quantity_tolerance", defaults.optimal_quantity_tolerance)
            ),
        )

    def to_dict(self) -> dict:
        return {
            "put_strike_percent": self.put_strike_percent,
            "hedge_ratio": self.hedge_ratio,
            "drawdown_threshold": self.drawdown_threshold,
            "min_days_to_expiration": self.min_days_to_expiration,
            "max_days_to_expiration": self.max_days_to_expiration,
            "min_option_volume": self.min_option_volume,
            "max_bid_ask_spread": self.max_bid_ask_spread,
            "minimum_evaluation_interval_hours": (
                self.minimum_evaluation_interval.total_seconds() / 3600
            ),
            "hedge_scale_drawdown_cap": self.hedge_scale_drawdown_cap,
            "strike_tolerance": self.strike_tolerance,
            "optimal_quantity_tolerance": self.optimal_quantity_tolerance,
        }

    def __repr__(self) -> str:
        return (
            f"HedgeConfig("
            f"strike_pct={self.put_strike_percent:.0%}, "
            f"ratio={self.hedge_ratio:.0%}, "
            f"threshold={self.drawdown_threshold:.2%}, "
            f"dte={self.min_days_to_expiration}-{self.max_days_to_expiration}, "
            f"min_volume={self.min_option_volume}, "
            f"max_spread={self.max_bid_ask_spread:.0%})"
        )


@dataclass(slots=True)
class UniverseConfig:
    """
    Universe selection configuration.

    Attributes:
        num_coarse: Names kept after the dollar-volume pass (default: 200)
        num_fine: Names kept after the market-cap pass (default: 70)
        min_price: Minimum share price, exclusive (default: 5.0)
        restricted_list_path: CSV of restricted ISINs (None = no restrictions)
    """

    num_coarse: int = 200
    num_fine: int = 70
    min_price: float = 5.0
    restricted_list_path: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []
        if self.num_coarse < 1:
            errors.append(f"num_coarse must be >= 1: {self.num_coarse}")
        if self.num_fine < 1:
            errors.append(f"num_fine must be >= 1: {self.num_fine}")
        if self.min_price < 0:
            errors.append(f"min_price must be >= 0: {self.min_price}")
        return errors

    @classmethod
    def from_dict(cls, data: dict) -> "UniverseConfig":
        return cls(
            num_coarse=int(data.get("num_coarse", 200)),
            num_fine=int(data.get("num_fine", 70)),
            min_price=float(data.get("min_price", 5.0)),
            restricted_list_path=data.get("restricted_list_path"),
        )

    def to_dict(self) -> dict:
        return {
            "num_coarse": self.num_coarse,
            "num_fine": self.num_fine,
            "min_price": self.min_price,
            "restricted_list_path": self.restricted_list_path,
        }


@dataclass(slots=True)
class RuntimeConfig:
    """
    Logging and audit trail configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to the rotating log file (None = stderr only)
        max_log_size_mb: Maximum log file size before rotation
        log_backup_count: Days of rotated logs to retain
        events_table_path: Delta Lake table for hedge events
        record_events: Write hedge events to the Delta Lake table
    """

    log_level: str = "INFO"
    log_file: Optional[str] = "logs/hedge_engine.log"
    max_log_size_mb: int = 50
    log_backup_count: int = 10
    events_table_path: str = "data/lake/hedge_events"
    record_events: bool = False

    def __post_init__(self):
        self.log_level = self.log_level.upper()

    def validate(self) -> List[str]:
        errors = []
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            errors.append(f"Invalid log_level: {self.log_level}. Must be one of {valid_levels}")
        if self.max_log_size_mb < 1:
            errors.append(f"max_log_size_mb must be >= 1: {self.max_log_size_mb}")
        if self.log_backup_count < 0:
            errors.append(f"log_backup_count must be >= 0: {self.log_backup_count}")
        return errors

    def get_log_config(self) -> dict:
        """
        Get logging configuration for loguru.

        Returns:
            Dictionary with loguru file sink configuration
        """
        return {
            "rotation": f"{self.max_log_size_mb} MB",
            "retention": f"{self.log_backup_count} days",
            "compression": "zip",
            "level": self.log_level,
            "format": (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RuntimeConfig":
        return cls(
            log_level=str(data.get("log_level", "INFO")),
            log_file=data.get("log_file", "logs/hedge_engine.log"),
            max_log_size_mb=int(data.get("max_log_size_mb", 50)),
            log_backup_count=int(data.get("log_backup_count", 10)),
            events_table_path=str(data.get("events_table_path", "data/lake/hedge_events")),
            record_events=bool(data.get("record_events", False)),
        )

    def to_dict(self) -> dict:
        return {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "max_log_size_mb": self.max_log_size_mb,
            "log_backup_count": self.log_backup_count,
            "events_table_path": self.events_table_path,
            "record_events": self.record_events,
        }


@dataclass
class AppConfig:
    """Complete hedge engine configuration."""

    hedge: HedgeConfig = field(default_factory=HedgeConfig)
    universe: UniverseConfig = field(default_factory=UniverseConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        """Create config from dictionary with nested dataclass instantiation."""
        return cls(
            hedge=HedgeConfig.from_dict(data.get("hedge") or {}),
            universe=UniverseConfig.from_dict(data.get("universe") or {}),
            runtime=RuntimeConfig.from_dict(data.get("runtime") or {}),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        return self.hedge.validate() + self.universe.validate() + self.runtime.validate()

    def to_dict(self) -> dict:
        return {
            "hedge": self.hedge.to_dict(),
            "universe": self.universe.to_dict(),
            "runtime": self.runtime.to_dict(),
        }
