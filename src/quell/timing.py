"""Clock and timer-scheduler ports used by the controller.

A clock is any zero-argument callable returning the current time as a float.
Only differences between two readings matter, so ``time.monotonic`` (the
default) is the natural choice.

A scheduler runs a callback after a delay and can cancel it again. The
production adapter, :class:`LoopScheduler`, uses the running asyncio loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

Clock = Callable[[], float]


@runtime_checkable
class Scheduler(Protocol):
    """Schedules delayed callbacks.

    Implementations must run callbacks one at a time on the owner's thread;
    the controller relies on that for lock-free state updates.
    """

    def schedule(self, callback: Callable[[], Any], delay: float) -> Any:
        """Run *callback* after *delay* and return a handle for :meth:`cancel`."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by :meth:`schedule`."""
        ...


class LoopScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop is resolved lazily with :func:`asyncio.get_running_loop` on the
    first :meth:`schedule`, so instances can be created outside a coroutine.

    A non-positive delay is scheduled with ``call_soon``: the callback runs
    on the next loop iteration, after everything already queued for the
    current one.
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, callback: Callable[[], Any], delay: float) -> asyncio.Handle:
        loop = self._get_loop()
        if delay <= 0:
            return loop.call_soon(callback)
        return loop.call_later(delay, callback)

    def cancel(self, handle: asyncio.Handle) -> None:
        handle.cancel()

    def __repr__(self) -> str:
        return f"LoopScheduler(loop={self._loop!r})"
