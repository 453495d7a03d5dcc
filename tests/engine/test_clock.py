"""Tests for the manual and asyncio clocks."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from purplesim.engine.clock import AsyncioClock, ManualClock


class TestManualClock:
    def test_starts_at_epoch(self):
        start = datetime(2030, 5, 1, tzinfo=timezone.utc)
        clock = ManualClock(start)
        assert clock.now() == start
        assert clock.elapsed == 0.0

    def test_advance_moves_now(self):
        clock = ManualClock()
        before = clock.now()
        clock.advance(90)
        assert clock.now() - before == timedelta(seconds=90)

    def test_timers_fire_in_due_order(self):
        clock = ManualClock()
        fired = []
        clock.call_later(5, lambda: fired.append("b"))
        clock.call_later(1, lambda: fired.append("a"))
        clock.call_later(5, lambda: fired.append("c"))
        assert clock.advance(10) == 3
        assert fired == ["a", "b", "c"]

    def test_timer_not_due_does_not_fire(self):
        clock = ManualClock()
        fired = []
        clock.call_later(5, lambda: fired.append(1))
        clock.advance(4.9)
        assert fired == []
        clock.advance(0.1)
        assert fired == [1]

    def test_callback_sees_its_due_time(self):
        clock = ManualClock()
        seen = []
        clock.call_later(3, lambda: seen.append(clock.elapsed))
        clock.advance(10)
        assert seen == [3]
        assert clock.elapsed == 10

    def test_nested_timer_fires_in_same_advance(self):
        clock = ManualClock()
        fired = []

        def first():
            fired.append("first")
            clock.call_later(2, lambda: fired.append("second"))

        clock.call_later(1, first)
        clock.advance(3)
        assert fired == ["first", "second"]

    def test_cancelled_timer_skipped(self):
        clock = ManualClock()
        fired = []
        handle = clock.call_later(1, lambda: fired.append(1))
        handle.cancel()
        assert clock.pending() == 0
        assert clock.advance(5) == 0
        assert fired == []

    def test_negative_advance_rejected(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)


class TestAsyncioClock:
    def test_now_is_utc(self):
        assert AsyncioClock().now().tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_call_later_uses_running_loop(self):
        clock = AsyncioClock()
        done = asyncio.Event()
        clock.call_later(0.01, done.set)
        await asyncio.wait_for(done.wait(), timeout=1.0)
        assert done.is_set()

    @pytest.mark.asyncio
    async def test_cancel(self):
        clock = AsyncioClock()
        fired = []
        handle = clock.call_later(0.01, lambda: fired.append(1))
        handle.cancel()
        await asyncio.sleep(0.05)
        assert fired == []
