"""Tests for the ChainScheduler: keyed delayed actions and bulk cancellation."""

from purplesim.engine.clock import ManualClock
from purplesim.engine.scheduler import ChainScheduler, StageKey


def _make_scheduler():
    clock = ManualClock()
    return clock, ChainScheduler(clock)


class TestSchedule:
    def test_action_runs_after_delay(self):
        clock, scheduler = _make_scheduler()
        fired = []
        scheduler.schedule("a", 2.0, lambda: fired.append("a"))
        clock.advance(1.9)
        assert fired == []
        clock.advance(0.1)
        assert fired == ["a"]

    def test_registry_tracks_pending(self):
        clock, scheduler = _make_scheduler()
        key = StageKey("chain-1", 0, "attack")
        scheduler.schedule(key, 1.0, lambda: None)
        assert scheduler.is_pending(key)
        assert scheduler.pending_keys() == [key]
        clock.advance(1.0)
        assert not scheduler.is_pending(key)
        assert scheduler.pending_count == 0

    def test_same_key_replaces_previous(self):
        clock, scheduler = _make_scheduler()
        fired = []
        scheduler.schedule("k", 1.0, lambda: fired.append("old"))
        scheduler.schedule("k", 2.0, lambda: fired.append("new"))
        assert scheduler.pending_count == 1
        clock.advance(5)
        assert fired == ["new"]

    def test_action_can_reschedule_its_own_key(self):
        clock, scheduler = _make_scheduler()
        fired = []

        def tick():
            fired.append(clock.elapsed)
            if len(fired) < 3:
                scheduler.schedule("tick", 1.0, tick)

        scheduler.schedule("tick", 1.0, tick)
        clock.advance(10)
        assert fired == [1.0, 2.0, 3.0]
        assert scheduler.pending_count == 0

    def test_failing_action_is_contained(self):
        clock, scheduler = _make_scheduler()
        fired = []

        def boom():
            raise RuntimeError("boom")

        scheduler.schedule("bad", 1.0, boom)
        scheduler.schedule("good", 2.0, lambda: fired.append("good"))
        clock.advance(3)
        assert fired == ["good"]


class TestCancel:
    def test_cancel_single_key(self):
        clock, scheduler = _make_scheduler()
        fired = []
        scheduler.schedule("a", 1.0, lambda: fired.append("a"))
        scheduler.schedule("b", 1.0, lambda: fired.append("b"))
        assert scheduler.cancel("a") is True
        assert scheduler.cancel("a") is False
        clock.advance(2)
        assert fired == ["b"]

    def test_cancel_all_stops_everything(self):
        clock, scheduler = _make_scheduler()
        fired = []
        for i in range(5):
            scheduler.schedule(StageKey("chain-1", i, "attack"), float(i), lambda i=i: fired.append(i))
        assert scheduler.cancel_all() == 5
        clock.advance(100)
        assert fired == []
        assert scheduler.pending_count == 0

    def test_cancel_all_on_empty_is_noop(self):
        _, scheduler = _make_scheduler()
        assert scheduler.cancel_all() == 0
        assert scheduler.cancel_all() == 0
        assert scheduler.pending_count == 0

    def test_cancel_all_bumps_generation(self):
        _, scheduler = _make_scheduler()
        start = scheduler.generation
        scheduler.cancel_all()
        assert scheduler.generation == start + 1

    def test_stale_generation_callback_dropped(self):
        """A timer whose handle survived cancellation still must not run its action."""
        clock = ManualClock()
        scheduler = ChainScheduler(clock)
        fired = []
        scheduler.schedule("a", 1.0, lambda: fired.append("a"))
        # Forget the handle without cancelling it, then bump the generation
        scheduler._timers.clear()
        scheduler.cancel_all()
        clock.advance(5)
        assert fired == []

    def test_stats(self):
        clock, scheduler = _make_scheduler()
        scheduler.schedule("a", 1.0, lambda: None)
        scheduler.schedule("b", 5.0, lambda: None)
        clock.advance(2)
        scheduler.cancel_all()
        stats = scheduler.get_stats()
        assert stats["total_scheduled"] == 2
        assert stats["total_fired"] == 1
        assert stats["total_cancelled"] == 1
        assert stats["pending"] == 0
