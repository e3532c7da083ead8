"""Tests for the clock abstraction (fund_kernel/domain/clock.py)."""

from datetime import datetime, timedelta, timezone

from fund_kernel.domain.clock import Clock, DeterministicClock, SystemClock


class TestDeterministicClock:
    def test_default_time_is_fixed(self):
        clock = DeterministicClock()
        assert clock.now() == datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc)
        assert clock.now() == clock.now()

    def test_advance(self):
        clock = DeterministicClock()
        start = clock.now()
        clock.advance(90)
        assert clock.now() - start == timedelta(seconds=90)

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(10)
        target = datetime(2024, 12, 31, 15, 5, tzinfo=timezone.utc)
        clock.set_time(target)
        assert clock.now() == target

    def test_now_utc_converts(self):
        jst = timezone(timedelta(hours=9))
        clock = DeterministicClock(datetime(2025, 1, 1, 9, 0, tzinfo=jst))
        assert clock.now_utc() == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)


class TestSystemClock:
    def test_is_clock(self):
        assert isinstance(SystemClock(), Clock)

    def test_returns_aware_utc(self):
        now = SystemClock().now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)
