#!/usr/bin/env python3
"""
Run Hedge Replay

This script replays a YAML scenario through the protective put hedge engine and
prints the target adjustments it returns at each step.

Usage:
    # Replay the bundled drawdown demo with default config (config/hedge_engine.yaml)
    python scripts/run_hedge_replay.py --scenario config/scenarios/drawdown_demo.yaml

    # Run with custom config and verbose logging
    python scripts/run_hedge_replay.py --config /path/to/config.yaml --scenario s.yaml --verbose

    # Also record hedge events to Delta Lake (runtime.events_table_path)
    python scripts/run_hedge_replay.py --scenario s.yaml --record-events
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from protective_put.config import load_config
from protective_put.data import HedgeEventRecorder, HedgeEventsTable
from protective_put.orchestration import load_scenario, run_replay
from protective_put.utils import configure_logging


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay a scenario through the protective put hedge engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to hedge engine config file (default: config/hedge_engine.yaml)",
    )

    parser.add_argument(
        "--scenario",
        type=str,
        default="config/scenarios/drawdown_demo.yaml",
        help="Path to scenario YAML file",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser.add_argument(
        "--record-events",
        action="store_true",
        help="Record hedge events to the Delta Lake events table",
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for hedge replay."""
    args = parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(f"Config file not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid config: {e}")
        return 1

    configure_logging(config.runtime, verbose=args.verbose)

    logger.info("=" * 80)
    logger.info("Protective Put Hedge Replay")
    logger.info("=" * 80)
    logger.info(f"Hedge config: {config.hedge!r}")

    try:
        scenario = load_scenario(args.scenario)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load scenario: {e}")
        return 1

    observers = []
    recorder = None
    if args.record_events or config.runtime.record_events:
        recorder = HedgeEventRecorder(HedgeEventsTable(config.runtime.events_table_path))
        observers.append(recorder)
        logger.info(f"Recording hedge events to {config.runtime.events_table_path}")

    try:
        results = run_replay(scenario, config.hedge, observers=observers)
    finally:
        if recorder is not None:
            recorder.flush()

    for step in results:
        print(f"[{step.index}] {step.timestamp:%Y-%m-%d %H:%M}  drawdown={step.drawdown:.2%}")
        if not step.adjustments:
            print("    (no adjustments)")
        for adjustment in step.adjustments:
            print(f"    {adjustment.symbol} -> {adjustment.quantity}  ({adjustment.reason.value})")

    logger.info("Hedge replay finished")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
