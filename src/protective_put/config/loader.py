"""
Configuration Loader Module

Loads the hedge engine configuration from a YAML file and applies environment
variable overrides (HEDGE_ prefix).

Config location: config/hedge_engine.yaml
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from protective_put.config.hedge_config import AppConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "hedge_engine.yaml"

# env var -> (section, key, type)
ENV_MAPPING = {
    "HEDGE_PUT_STRIKE_PERCENT": ("hedge", "put_strike_percent", float),
    "HEDGE_RATIO": ("hedge", "hedge_ratio", float),
    "HEDGE_DRAWDOWN_THRESHOLD": ("hedge", "drawdown_threshold", float),
    "HEDGE_MIN_DAYS_TO_EXPIRATION": ("hedge", "min_days_to_expiration", int),
    "HEDGE_MAX_DAYS_TO_EXPIRATION": ("hedge", "max_days_to_expiration", int),
    "HEDGE_MIN_OPTION_VOLUME": ("hedge", "min_option_volume", int),
    "HEDGE_MAX_BID_ASK_SPREAD": ("hedge", "max_bid_ask_spread", float),
    "HEDGE_MIN_EVALUATION_INTERVAL_HOURS": ("hedge", "minimum_evaluation_interval_hours", float),
    "HEDGE_SCALE_DRAWDOWN_CAP": ("hedge", "hedge_scale_drawdown_cap", float),
    "HEDGE_STRIKE_TOLERANCE": ("hedge", "strike_tolerance", float),
    "HEDGE_OPTIMAL_QUANTITY_TOLERANCE": ("hedge", "optimal_quantity_tolerance", int),
    "HEDGE_UNIVERSE_NUM_COARSE": ("universe", "num_coarse", int),
    "HEDGE_UNIVERSE_NUM_FINE": ("universe", "num_fine", int),
    "HEDGE_UNIVERSE_MIN_PRICE": ("universe", "min_price", float),
    "HEDGE_RESTRICTED_LIST_PATH": ("universe", "restricted_list_path", str),
    "HEDGE_LOG_LEVEL": ("runtime", "log_level", str),
    "HEDGE_LOG_FILE": ("runtime", "log_file", str),
    "HEDGE_EVENTS_TABLE_PATH": ("runtime", "events_table_path", str),
    "HEDGE_RECORD_EVENTS": ("runtime", "record_events", bool),
}


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.

    Examples:
        HEDGE_DRAWDOWN_THRESHOLD=-0.10
        HEDGE_LOG_LEVEL=DEBUG
        HEDGE_RECORD_EVENTS=true

    Args:
        config_data: Configuration data from file

    Returns:
        Merged configuration with env vars applied
    """
    for env_var, (section, key, value_type) in ENV_MAPPING.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue

        if value_type is bool:
            value = env_value.lower() in ("true", "1", "yes", "on")
        else:
            value = value_type(env_value)

        section_data = config_data.get(section) or {}
        section_data[key] = value
        config_data[section] = section_data

        logger.debug(f"Overriding {section}.{key} from env: {env_var}")

    return config_data


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load hedge engine configuration from YAML file.

    Args:
        config_path: Path to config file (default: config/hedge_engine.yaml)

    Returns:
        AppConfig object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If configuration is invalid
    """
    config_file = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if not config_file.exists():
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {config_file}")
        logger.warning(f"Hedge config file not found: {config_file}, using defaults")
    else:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
        if not data:
            logger.warning(f"Empty config file: {config_file}, using defaults")

    data = merge_config_with_env(data)

    config = AppConfig.from_dict(data)

    errors = config.validate()
    if errors:
        error_msg = "Configuration validation errors:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)

    logger.info(f"Loaded hedge config: {config.hedge!r}")
    return config


def save_config(config: AppConfig, config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        config_path: Path to save config file
    """
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved hedge config to {config_file}")
