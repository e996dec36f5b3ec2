"""
Clocks: wall clock and manually driven clock.
"""

from datetime import datetime, timezone

import pytest

from authkit.clock import ManualClock, SystemClock


class TestClocks:

    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo == timezone.utc

    def test_manual_default_start(self):
        assert ManualClock().now() == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_naive_start_treated_as_utc(self):
        clock = ManualClock(datetime(2030, 5, 1))
        assert clock.now().tzinfo == timezone.utc

    def test_advance(self, clock):
        start = clock.now()
        assert (clock.advance(90) - start).total_seconds() == 90

    def test_cannot_go_backwards(self, clock):
        with pytest.raises(ValueError):
            clock.advance(-1)

    def test_set(self, clock):
        clock.set(datetime(2025, 6, 1))
        assert clock.now() == datetime(2025, 6, 1, tzinfo=timezone.utc)
