"""Deterministic clock and scheduler for exercising debounce timing.

Tests inject a :class:`VirtualClock` and a :class:`VirtualScheduler` so time
only moves when they say so. The unit is whatever the test wants, since
nothing here reads the real clock.

Example::

    clock = VirtualClock()
    scheduler = VirtualScheduler(clock)
    controller = DebounceController(save, DebounceConfig(wait=100), clock=clock, scheduler=scheduler)

    controller.call("a")
    scheduler.advance(30)
    controller.call("b")
    scheduler.advance(100)  # save("b") ran at t=130
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from typing import Any


class VirtualClock:
    """Controllable clock.

    Instances are callable, so they plug straight into the ``clock``
    parameter. Moving the clock does not run timers; use
    :meth:`VirtualScheduler.advance` for that.
    """

    __slots__ = ("time",)

    def __init__(self, start: float = 0.0) -> None:
        self.time = start

    def __call__(self) -> float:
        return self.time

    def advance(self, delta: float) -> float:
        self.time += delta
        return self.time

    def set(self, value: float) -> float:
        """Jump to *value*; going backwards is allowed."""
        self.time = value
        return self.time

    def __repr__(self) -> str:
        return f"VirtualClock(time={self.time})"


class VirtualTimer:
    """Handle returned by :meth:`VirtualScheduler.schedule`."""

    __slots__ = ("callback", "cancelled", "due")

    def __init__(self, callback: Callable[[], Any], due: float) -> None:
        self.callback = callback
        self.due = due
        self.cancelled = False

    def __repr__(self) -> str:
        return f"VirtualTimer(due={self.due}, cancelled={self.cancelled})"


class VirtualScheduler:
    """Scheduler that fires callbacks only when virtual time is advanced.

    Callbacks run in due-time order, ties in scheduling order. Callbacks
    scheduled while advancing run in the same advance if they fall due
    before its target. A non-positive delay is due "now" but still waits
    for the next advance, like ``loop.call_soon``.
    """

    __slots__ = ("_counter", "_live", "_queue", "clock", "fired")

    def __init__(self, clock: VirtualClock | None = None) -> None:
        self.clock = clock or VirtualClock()
        self._queue: list[tuple[float, int, VirtualTimer]] = []
        self._counter = itertools.count()
        self._live = 0
        self.fired = 0

    def schedule(self, callback: Callable[[], Any], delay: float) -> VirtualTimer:
        timer = VirtualTimer(callback, self.clock.time + max(0.0, delay))
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        self._live += 1
        return timer

    def cancel(self, handle: VirtualTimer) -> None:
        # Fired timers are already flagged, so they are not counted twice.
        if handle.cancelled:
            return
        handle.cancelled = True
        self._live -= 1

    @property
    def pending_count(self) -> int:
        return self._live

    def next_due(self) -> float | None:
        """Due time of the earliest live timer."""
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def advance(self, delta: float = 0.0) -> int:
        return self.advance_to(self.clock.time + delta)

    def advance_to(self, target: float) -> int:
        """Move the clock to *target*, running every timer due on the way.

        Returns the number of callbacks run. If a callback raises, the
        error propagates with the clock left at that timer's due time and
        the timers still due are kept for the next advance.
        """
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            # Timers never move the clock backwards.
            self.clock.time = max(self.clock.time, due)
            timer.cancelled = True
            self._live -= 1
            ran += 1
            self.fired += 1
            timer.callback()
        self.clock.time = max(self.clock.time, target)
        return ran

    def run_all(self, limit: int = 10_000) -> int:
        """Advance until no timers remain."""
        ran = 0
        due = self.next_due()
        while due is not None:
            ran += self.advance_to(due)
            due = self.next_due()
            if ran >= limit:
                raise RuntimeError(f"Timers still pending after {limit} callbacks")
        return ran

    def __repr__(self) -> str:
        return f"VirtualScheduler(time={self.clock.time}, pending={self.pending_count})"
