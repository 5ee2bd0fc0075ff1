"""Test fixtures for protective put hedge engine tests.

This package provides reusable test fixtures for:
- Option catalogs around a known target strike and expiry
- Portfolio snapshots
- An in-memory host collaborator

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.market_fixtures import (
    FakeHost,
    fake_host,
    hedge_config,
    make_option,
    make_put,
    make_snapshot,
    spy_chain,
    spy_position,
)

__all__ = [
    "FakeHost",
    "make_option",
    "make_put",
    "make_snapshot",
    "fake_host",
    "hedge_config",
    "spy_chain",
    "spy_position",
]
