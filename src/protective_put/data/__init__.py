"""
Data Package

Hedge ledger (underlying -> held put) and the Delta Lake audit trail of
hedge events.
"""

from protective_put.data.hedge_ledger import HedgeLedger
from protective_put.data.hedge_events import (
    HEDGE_EVENTS_SCHEMA,
    HedgeEventRecorder,
    HedgeEventsTable,
)

__all__ = [
    "HedgeLedger",
    "HedgeEventsTable",
    "HedgeEventRecorder",
    "HEDGE_EVENTS_SCHEMA",
]
