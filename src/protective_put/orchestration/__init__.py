"""
Orchestration Package

Scenario replay host for driving the hedge engine outside a live runtime.
"""

from protective_put.orchestration.replay import (
    ReplayStep,
    Scenario,
    ScenarioHost,
    ScenarioStep,
    load_scenario,
    parse_scenario,
    run_replay,
)

__all__ = [
    "ScenarioHost",
    "Scenario",
    "ScenarioStep",
    "ReplayStep",
    "load_scenario",
    "parse_scenario",
    "run_replay",
]
