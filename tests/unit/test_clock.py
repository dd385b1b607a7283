"""Test WallClock, SimClock and local_today."""

from datetime import date, datetime, timedelta, timezone

import pytest

from trade_journal.core.clock import SimClock, WallClock, local_today


class TestWallClock:
    def test_now_returns_utc(self):
        now = WallClock().now()
        assert now.tzinfo == timezone.utc

    def test_now_is_recent(self):
        diff = abs((datetime.now(timezone.utc) - WallClock().now()).total_seconds())
        assert diff < 1.0

    def test_now_ms_returns_int(self):
        ms = WallClock().now_ms()
        assert isinstance(ms, int)
        assert ms > 0


class TestSimClock:
    def test_default_start(self):
        assert SimClock().now() == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_now_ms(self):
        clock = SimClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert clock.now_ms() == 1_704_067_200_000

    def test_advance_ms(self):
        clock = SimClock()
        start = clock.now()
        clock.advance_ms(1500)
        assert clock.now() - start == timedelta(milliseconds=1500)

    def test_cannot_go_backwards(self):
        clock = SimClock()
        with pytest.raises(ValueError, match="backwards"):
            clock.set_time(datetime(2023, 1, 1, tzinfo=timezone.utc))


class TestLocalToday:
    def test_uses_local_calendar_date(self, sim_clock):
        assert local_today(sim_clock) == date(2024, 3, 15)
