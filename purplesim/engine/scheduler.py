"""Chain Scheduler: registry of every in-flight delayed action.

Each action is tracked under a key (a ``StageKey`` for attack chain stages, a
plain string for engine timers) so the whole set can be cancelled in one step
when the exercise is paused or stopped.
"""

from typing import Callable, Hashable, NamedTuple

from ..utils.logging import get_logger
from .clock import Clock, TimerHandle

logger = get_logger("engine.scheduler")


class StageKey(NamedTuple):
    chain_id: str
    phase_index: int
    stage: str


class ChainScheduler:
    """Keyed delayed-callback registry on top of a ``Clock``.

    ``cancel_all()`` bumps a generation counter in addition to cancelling the
    timer handles: a callback from an older generation that still reaches the
    firing path is dropped without running its action.
    """

    def __init__(self, clock: Clock, name: str = "chains"):
        self._clock = clock
        self._name = name
        self._timers: dict[Hashable, TimerHandle] = {}
        self._generation = 0
        self._total_scheduled = 0
        self._total_fired = 0
        self._total_cancelled = 0

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def pending_keys(self) -> list[Hashable]:
        return list(self._timers.keys())

    def is_pending(self, key: Hashable) -> bool:
        return key in self._timers

    def schedule(self, key: Hashable, delay: float, action: Callable[[], None]) -> None:
        """Run ``action`` after ``delay`` seconds. An existing key is replaced."""
        previous = self._timers.pop(key, None)
        if previous is not None:
            previous.cancel()
            self._total_cancelled += 1

        generation = self._generation

        def _fire() -> None:
            if generation != self._generation:
                return
            # Only drop the registry entry if it still belongs to this timer
            if self._timers.get(key) is handle:
                del self._timers[key]
            self._total_fired += 1
            try:
                action()
            except Exception as e:
                logger.error("scheduled_action_failed", scheduler=self._name, key=str(key), error=str(e), exc_info=True)

        handle = self._clock.call_later(delay, _fire)
        self._timers[key] = handle
        self._total_scheduled += 1

    def cancel(self, key: Hashable) -> bool:
        handle = self._timers.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        self._total_cancelled += 1
        return True

    def cancel_all(self) -> int:
        """Cancel every outstanding action. Safe to call repeatedly."""
        self._generation += 1
        timers = list(self._timers.values())
        self._timers.clear()
        for handle in timers:
            handle.cancel()
        self._total_cancelled += len(timers)
        if timers:
            logger.debug("scheduler_cancelled_all", scheduler=self._name, cancelled=len(timers))
        return len(timers)

    def get_stats(self) -> dict:
        return {
            "name": self._name,
            "pending": len(self._timers),
            "generation": self._generation,
            "total_scheduled": self._total_scheduled,
            "total_fired": self._total_fired,
            "total_cancelled": self._total_cancelled,
        }
