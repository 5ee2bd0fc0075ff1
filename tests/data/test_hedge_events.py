"""
Tests for Hedge Events Delta Lake persistence.

Tests HedgeEventsTable and HedgeEventRecorder.
"""

import json
from datetime import datetime
from decimal import Decimal

import polars as pl
import pytest
from deltalake import DeltaTable

from protective_put.data.hedge_events import (
    HEDGE_EVENTS_SCHEMA,
    HedgeEventRecorder,
    HedgeEventsTable,
    event_to_record,
)
from protective_put.decisions.models import HedgeEvent, HedgeEventType


def opened_event(minute: int = 0) -> HedgeEvent:
    return HedgeEvent(
        event_type=HedgeEventType.HEDGE_OPENED,
        timestamp=datetime(2024, 1, 2, 16, minute),
        underlying="SPY",
        contract="SPY 240303P00088000",
        quantity=37,
        drawdown=Decimal("-0.15"),
        metadata={"strike": "88", "expiry": "2024-03-03"},
    )


@pytest.fixture
def events_table(lake_path):
    """Create a HedgeEventsTable in a temporary lake."""
    return HedgeEventsTable(lake_path / "hedge_events")


class TestHedgeEvent:
    """Test HedgeEvent model."""

    def test_to_dict(self):
        """Test drawdown becomes a float and metadata stays a dict."""
        data = opened_event().to_dict()

        assert data["event_type"] == "hedge_opened"
        assert data["underlying"] == "SPY"
        assert data["quantity"] == 37
        assert data["drawdown"] == pytest.approx(-0.15)
        assert data["metadata"] == {"strike": "88", "expiry": "2024-03-03"}

    def test_to_dict_without_drawdown(self):
        event = HedgeEvent(event_type=HedgeEventType.EVALUATION_THROTTLED, timestamp=datetime(2024, 1, 2))

        assert event.to_dict()["drawdown"] is None

    def test_event_to_record(self):
        """Test records carry an id, a recording time and JSON metadata."""
        recorded_at = datetime(2024, 1, 2, 17, 0)

        record = event_to_record(opened_event(), recorded_at=recorded_at)

        assert set(record) == set(HEDGE_EVENTS_SCHEMA.names())
        assert len(record["event_id"]) == 36
        assert record["recorded_at"] == recorded_at
        assert json.loads(record["metadata"]) == {"strike": "88", "expiry": "2024-03-03"}

    def test_event_to_record_empty_metadata(self):
        event = HedgeEvent(event_type=HedgeEventType.HEDGE_OFF, timestamp=datetime(2024, 1, 2))

        assert event_to_record(event)["metadata"] is None


class TestHedgeEventsTable:
    """Test HedgeEventsTable."""

    def test_table_creation(self, events_table):
        """Test table is created with the event schema."""
        assert DeltaTable.is_deltatable(str(events_table.table_path))

        df = events_table.read()
        assert df.height == 0
        assert set(df.columns) == set(HEDGE_EVENTS_SCHEMA.names())

    def test_existing_table_reused(self, lake_path):
        """Test opening an existing table keeps its version."""
        HedgeEventsTable(lake_path / "hedge_events")
        version = DeltaTable(str(lake_path / "hedge_events")).version()

        HedgeEventsTable(lake_path / "hedge_events")

        assert DeltaTable(str(lake_path / "hedge_events")).version() == version


class TestHedgeEventRecorder:
    """Test HedgeEventRecorder."""

    def test_events_buffered_until_flush(self, events_table):
        """Test events stay in the buffer below the batch size."""
        recorder = HedgeEventRecorder(events_table, batch_size=10)

        recorder.on_event(opened_event())
        recorder.on_event(opened_event(1))

        assert recorder.pending == 2
        assert events_table.read().height == 0

        assert recorder.flush() == 2
        assert recorder.pending == 0
        assert events_table.read().height == 2

    def test_batch_written_when_full(self, events_table):
        """Test a full buffer writes automatically."""
        recorder = HedgeEventRecorder(events_table, batch_size=2)

        recorder.on_event(opened_event())
        recorder.on_event(opened_event(1))

        assert recorder.pending == 0
        assert recorder.events_written == 2
        assert events_table.read().height == 2

    def test_recorded_values(self, events_table):
        """Test column values round through the table."""
        recorder = HedgeEventRecorder(events_table)
        recorder.on_event(opened_event())
        recorder.on_event(HedgeEvent(
            event_type=HedgeEventType.HEDGE_OFF,
            timestamp=datetime(2024, 1, 3, 16, 0),
            drawdown=Decimal("-0.05"),
            metadata={"cleared": 1, "closed": 1},
        ))
        recorder.flush()

        df = events_table.read()

        assert df.get_column("event_type").to_list() == ["hedge_opened", "hedge_off"]
        assert df.get_column("quantity").to_list() == [37, None]
        assert df.get_column("contract").to_list() == ["SPY 240303P00088000", None]
        assert json.loads(df.get_column("metadata")[1]) == {"cleared": 1, "closed": 1}

    def test_flush_empty_buffer(self, events_table):
        recorder = HedgeEventRecorder(events_table)

        assert recorder.flush() == 0

    def test_invalid_batch_size(self, events_table):
        with pytest.raises(ValueError, match="batch_size"):
            HedgeEventRecorder(events_table, batch_size=0)

    def test_appends_across_flushes(self, events_table):
        """Test repeated flushes append."""
        recorder = HedgeEventRecorder(events_table)

        for minute in range(3):
            recorder.on_event(opened_event(minute))
            recorder.flush()

        assert events_table.read().height == 3
        assert recorder.events_written == 3
        assert isinstance(events_table.read(), pl.DataFrame)
