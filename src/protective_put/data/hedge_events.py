"""
Hedge Events - Delta Lake Audit Trail

This module persists the hedge engine's structured events to Delta Lake for
post-mortem analysis of hedge decisions.

Key patterns:
- Every HedgeEvent an engine emits can be appended to one Delta Lake table
- Events are buffered and written in batches to avoid the small files problem
- Audit trail only: engine state is never reloaded from this table

Recorded per event:
1. Event type, evaluation time, recording time
2. Underlying, contract and quantity (when the event concerns them)
3. Portfolio drawdown at the time of the event
4. Event-specific metadata as a JSON string
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import polars as pl
from deltalake import DeltaTable, write_deltalake
from loguru import logger

from protective_put.decisions.models import HedgeEvent

logger = logger.bind(component="HedgeEventRecorder")

HEDGE_EVENTS_SCHEMA = pl.Schema({
    "event_id": pl.String,
    "event_type": pl.String,
    "timestamp": pl.Datetime("us"),
    "recorded_at": pl.Datetime("us"),
    "underlying": pl.String,
    "contract": pl.String,
    "quantity": pl.Int64,
    "drawdown": pl.Float64,
    "metadata": pl.String,
})


class HedgeEventsTable:
    """Delta Lake table for hedge events."""

    def __init__(self, table_path: str | Path = "data/lake/hedge_events"):
        """
        Initialize hedge events table.

        Args:
            table_path: Path to Delta Lake table
        """
        self.table_path = Path(table_path)
        self._ensure_table_exists()

    def _ensure_table_exists(self) -> None:
        """Create table if it doesn't exist."""
        if DeltaTable.is_deltatable(str(self.table_path)):
            return

        self.table_path.parent.mkdir(parents=True, exist_ok=True)
        empty_df = pl.DataFrame(schema=HEDGE_EVENTS_SCHEMA)
        write_deltalake(
            str(self.table_path),
            empty_df.to_arrow(),
            mode="overwrite",
        )

        logger.info(f"Created hedge events table at {self.table_path}")

    def read(self) -> pl.DataFrame:
        """Read all recorded events, oldest first."""
        df = pl.read_delta(str(self.table_path))
        return df.sort("timestamp", "recorded_at")


def event_to_record(event: HedgeEvent, recorded_at: datetime | None = None) -> dict[str, Any]:
    """Flatten a HedgeEvent into a row matching HEDGE_EVENTS_SCHEMA."""
    record = event.to_dict()
    metadata = record.pop("metadata")
    record["event_id"] = str(uuid.uuid4())
    record["recorded_at"] = recorded_at or datetime.now()
    record["metadata"] = json.dumps(metadata, default=str) if metadata else None
    return record


class HedgeEventRecorder:
    """
    Observer that records hedge events to Delta Lake.

    Events are buffered and written once `batch_size` is reached, or on
    `flush()`. A failed write keeps the buffer so the next write retries it.

    Usage:
        >>> recorder = HedgeEventRecorder(HedgeEventsTable("data/lake/hedge_events"))
        >>> engine = HedgeDecisionEngine(config, observers=[recorder])
        >>> engine.evaluate(snapshot, host)
        >>> recorder.flush()
    """

    def __init__(self, table: HedgeEventsTable | None = None, batch_size: int = 100):
        """
        Initialize hedge event recorder.

        Args:
            table: HedgeEventsTable instance (creates default if None)
            batch_size: Number of events to batch before writing
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self.table = table or HedgeEventsTable()
        self.batch_size = batch_size
        self._buffer: list[dict[str, Any]] = []
        self.events_written = 0

    @property
    def pending(self) -> int:
        """Number of buffered events not yet written."""
        return len(self._buffer)

    def on_event(self, event: HedgeEvent) -> None:
        """Buffer an event and write the batch if full."""
        self._buffer.append(event_to_record(event))
        if len(self._buffer) >= self.batch_size:
            self._write_batch()

    def flush(self) -> int:
        """
        Flush all buffered events to Delta Lake.

        Returns:
            Number of events written
        """
        return self._write_batch()

    def _write_batch(self) -> int:
        if not self._buffer:
            return 0

        try:
            df = pl.DataFrame(self._buffer, schema=HEDGE_EVENTS_SCHEMA)
            write_deltalake(
                str(self.table.table_path),
                df.to_arrow(),
                mode="append",
            )
        except Exception as e:
            logger.error(f"Failed to write hedge events: {e}")
            # Keep buffer on error (will retry next time)
            return 0

        written = len(self._buffer)
        self.events_written += written
        self._buffer.clear()
        logger.debug(f"Wrote {written} hedge events to Delta Lake")
        return written
