"""
Tests for Drawdown Tracker

Tests high-water mark tracking and exact drawdown arithmetic.
"""

from decimal import Decimal

import pytest

from protective_put.risk_manager.drawdown import DrawdownTracker


class TestDrawdownTracker:
    """Tests for DrawdownTracker class."""

    def test_initial_state(self):
        """Test tracker starts with nothing observed."""
        tracker = DrawdownTracker()

        assert tracker.high_water_mark == Decimal("0")
        assert tracker.current_drawdown == Decimal("0")

    def test_first_update_sets_high_water_mark(self):
        """Test first positive value becomes the high-water mark with zero drawdown."""
        tracker = DrawdownTracker()

        drawdown = tracker.update(100_000)

        assert tracker.high_water_mark == Decimal("100000")
        assert drawdown == Decimal("0")

    def test_drawdown_is_exact(self):
        """Test drawdown = V/H - 1 without float artifacts."""
        tracker = DrawdownTracker()
        tracker.update(100_000)

        assert tracker.update(85_000) == Decimal("-0.15")
        assert tracker.update(88_000) == Decimal("-0.12")
        assert tracker.update(80_000) == Decimal("-0.2")
        assert tracker.current_drawdown == Decimal("-0.2")

    def test_float_values_converted_through_str(self):
        """Test float inputs don't leak binary artifacts into the drawdown."""
        tracker = DrawdownTracker()
        tracker.update(1000.1)

        assert tracker.high_water_mark == Decimal("1000.1")

    def test_high_water_mark_never_decreases(self):
        """Test high-water mark is the running maximum."""
        tracker = DrawdownTracker()
        values = [100, 120, 90, 130, 50, 129]
        running_max = Decimal("0")

        for value in values:
            tracker.update(value)
            running_max = max(running_max, Decimal(value))
            assert tracker.high_water_mark == running_max

        assert tracker.high_water_mark == Decimal("130")

    def test_new_high_resets_drawdown(self):
        """Test a new high brings drawdown back to zero."""
        tracker = DrawdownTracker()
        tracker.update(100)
        tracker.update(80)

        assert tracker.update(110) == Decimal("0")

    def test_zero_portfolio_value(self):
        """Test zero values before any high never divide by zero."""
        tracker = DrawdownTracker()

        assert tracker.update(0) == Decimal("0")
        assert tracker.update(0) == Decimal("0")
        assert tracker.high_water_mark == Decimal("0")

    def test_zero_after_high_is_full_drawdown(self):
        """Test a wiped-out portfolio reports -100%."""
        tracker = DrawdownTracker()
        tracker.update(100)

        assert tracker.update(0) == Decimal("-1")

    def test_negative_value_rejected(self):
        """Test negative portfolio values are a programmer error."""
        tracker = DrawdownTracker()

        with pytest.raises(ValueError, match="non-negative"):
            tracker.update(-1)

    def test_reset(self):
        """Test reset forgets the high-water mark."""
        tracker = DrawdownTracker()
        tracker.update(100)
        tracker.update(50)

        tracker.reset()

        assert tracker.high_water_mark == Decimal("0")
        assert tracker.current_drawdown == Decimal("0")
        assert tracker.update(60) == Decimal("0")

    def test_repr(self):
        """Test string representation."""
        tracker = DrawdownTracker()
        tracker.update(100)
        tracker.update(85)

        assert repr(tracker) == "DrawdownTracker(high=100.00, drawdown=-15.00%)"
