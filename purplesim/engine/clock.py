"""Timer facilities the scheduler runs on.

``AsyncioClock`` drives the live service through the running event loop.
``ManualClock`` keeps virtual time that only moves when ``advance()`` is
called, so whole exercises can be fast-forwarded deterministically.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioClock:
    """Wall-clock timers backed by ``loop.call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)


class _ManualTimer:
    __slots__ = ("due", "seq", "callback", "cancelled")

    def __init__(self, due: float, seq: int, callback: Callable[[], None]):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: "_ManualTimer") -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class ManualClock:
    """Virtual clock. Timers fire in (due time, scheduling order) order."""

    def __init__(self, start: Optional[datetime] = None):
        self._epoch = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._elapsed = 0.0
        self._heap: list[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def elapsed(self) -> float:
        """Seconds of virtual time since the clock was created."""
        return self._elapsed

    def now(self) -> datetime:
        return self._epoch + timedelta(seconds=self._elapsed)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self._elapsed + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._heap, timer)
        return timer

    def pending(self) -> int:
        return sum(1 for t in self._heap if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer that falls due on the way.

        Timers scheduled by a firing callback run in the same call when they
        are due before the target time. Returns the number of callbacks run.
        """
        if seconds < 0:
            raise ValueError("cannot advance a clock backwards")
        target = self._elapsed + seconds
        fired = 0
        while self._heap and self._heap[0].due <= target:
            timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            self._elapsed = timer.due
            timer.callback()
            fired += 1
        self._elapsed = target
        return fired
