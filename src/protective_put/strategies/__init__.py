"""
Universe Selection Package

Fundamental universe selection with a restricted instrument list.
"""

from protective_put.strategies.restricted_list import (
    RestrictedList,
    RestrictedListError,
    load_restricted_list,
)
from protective_put.strategies.universe_selection import SelectionStats, UniverseSelector

__all__ = [
    "RestrictedList",
    "RestrictedListError",
    "load_restricted_list",
    "UniverseSelector",
    "SelectionStats",
]
