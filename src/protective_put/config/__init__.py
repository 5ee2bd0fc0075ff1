"""
Configuration Package

Dataclass configuration for the hedge engine, loaded from YAML with
HEDGE_* environment overrides.
"""

from protective_put.config.hedge_config import AppConfig, HedgeConfig, RuntimeConfig, UniverseConfig
from protective_put.config.loader import load_config, merge_config_with_env, save_config

__all__ = [
    "AppConfig",
    "HedgeConfig",
    "UniverseConfig",
    "RuntimeConfig",
    "load_config",
    "save_config",
    "merge_config_with_env",
]
