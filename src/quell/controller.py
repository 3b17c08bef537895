"""Debounce controller: the timing state machine behind every debounced callable."""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import TYPE_CHECKING, Any

from loguru import logger

from quell.config import DebounceConfig
from quell.timing import LoopScheduler

if TYPE_CHECKING:
    from collections.abc import Callable

    from quell.timing import Clock, Scheduler


class DebounceController:
    """Coalesce bursts of calls into a bounded number of invocations.

    How it works:
        - Every call records its arguments and time. Only the latest
          arguments survive.
        - The first call of a quiet period opens a window and schedules a
          trailing-edge check ``wait`` later (invoking right away when
          ``leading`` is set).
        - When the check fires it invokes with the held arguments if the
          window has gone quiet, otherwise it reschedules itself for the
          remaining time.
        - ``max_wait`` caps the time between invocations, so a continuous
          stream of calls still makes progress.

    Example::

        wait=100, calls at t=0 "a", t=30 "b", t=60 "c"

        t=0    "a"           -> open window, check at t=100
        t=30   "b"           -> remember "b"
        t=60   "c"           -> remember "c"
        t=100  check         -> 40 since last call, retry at t=160
        t=160  check         -> quiet for 100, invoke func("c")

    Only one timer is ever scheduled per controller. State is mutated only
    by :meth:`call`, :meth:`cancel`, :meth:`flush` and the timer callback,
    all on the scheduler's thread, so no locking is done.

    Args:
        func: Target callable. Invocation always uses the current
              :attr:`func`, even for calls recorded before it was replaced.
        config: Timing and edge policy.
        clock: Zero-argument callable returning the current time.
               Defaults to :func:`time.monotonic`.
        scheduler: Timer scheduler. Defaults to a :class:`LoopScheduler`
                   bound to the running asyncio loop.

    Raises:
        TypeError: If *func* is not callable.
    """

    __slots__ = (
        "_clock",
        "_config",
        "_enabled",
        "_func",
        "_last_args",
        "_last_call_time",
        "_last_invoke_time",
        "_result",
        "_scheduler",
        "_tasks",
        "_timer",
    )

    def __init__(
        self,
        func: Callable[..., Any],
        config: DebounceConfig | None = None,
        *,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")

        self._func = func
        self._config = config or DebounceConfig()
        self._clock: Clock = clock or time.monotonic
        self._scheduler: Scheduler = scheduler or LoopScheduler()
        self._last_args: tuple[tuple[Any, ...], dict[str, Any]] | None = None
        self._last_call_time: float | None = None
        self._last_invoke_time: float = 0.0
        self._timer: Any = None
        self._result: Any = None
        self._tasks: set[asyncio.Future[Any]] = set()
        self._enabled = True

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    @func.setter
    def func(self, value: Callable[..., Any]) -> None:
        if not callable(value):
            raise TypeError(f"Expected a callable, got {type(value).__name__}")
        self._func = value

    @property
    def config(self) -> DebounceConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def closed(self) -> bool:
        return not self._enabled

    @property
    def result(self) -> Any:
        """Result of the most recent invocation."""
        return self._result

    @property
    def last_call_time(self) -> float | None:
        return self._last_call_time

    @property
    def last_invoke_time(self) -> float:
        return self._last_invoke_time

    def call(self, *args: Any, **kwargs: Any) -> Any:
        """Request an invocation with these arguments.

        Returns the fresh result when this call triggers an invocation,
        otherwise the result of the previous invocation.
        """
        if not self._enabled:
            return self._result

        now = self._clock()
        is_invoking = self._should_invoke(now)

        self._last_args = (args, kwargs)
        self._last_call_time = now

        if is_invoking:
            if self._timer is None:
                # New window: max_wait is measured from here.
                self._last_invoke_time = now
                self._start_timer(self._config.wait)
                if self._config.leading:
                    return self._invoke(now, "leading")
                return self._result

            if self._config.maxing:
                # Calls in a tight loop never let the timer see a quiet period.
                self._start_timer(self._config.wait)
                return self._invoke(now, "max_wait")

        if self._timer is None:
            self._start_timer(self._config.wait)

        logger.trace("Deferred call to {}", self._name)
        return self._result

    __call__ = call

    def cancel(self) -> None:
        """Drop any pending invocation and forget call history.

        The cached :attr:`result` survives.
        """
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            logger.debug("Cancelled pending invocation of {}", self._name)

        self._last_invoke_time = 0.0
        self._last_args = None
        self._last_call_time = None
        self._timer = None

    def flush(self) -> Any:
        """Run the pending trailing edge now, if there is one."""
        if self._timer is None:
            return self._result

        self._scheduler.cancel(self._timer)
        logger.debug("Flushing {}", self._name)
        return self._trailing_edge(self._clock())

    def pending(self) -> bool:
        """Whether a trailing-edge check is scheduled."""
        return self._timer is not None

    def close(self) -> None:
        """Tear down: cancel pending work and ignore all future calls."""
        if not self._enabled:
            return

        self._enabled = False
        self.cancel()
        logger.debug("Closed debounce controller for {}", self._name)

    def _should_invoke(self, now: float) -> bool:
        if not self._enabled:
            return False

        if self._last_call_time is None:
            return True

        since_call = now - self._last_call_time
        since_invoke = now - self._last_invoke_time

        # First call, quiet period over, clock went backwards, or max_wait hit.
        return (
            since_call >= self._config.wait
            or since_call < 0
            or (self._config.maxing and since_invoke >= self._config.max_wait)
        )

    def _start_timer(self, delay: float) -> None:
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
        self._timer = self._scheduler.schedule(self._timer_expired, delay)

    def _timer_expired(self) -> Any:
        self._timer = None
        if not self._enabled:
            return self._result

        now = self._clock()
        if self._should_invoke(now):
            return self._trailing_edge(now)

        remaining = self._config.wait - (now - self._last_call_time)
        if self._config.maxing:
            remaining = min(remaining, self._config.max_wait - (now - self._last_invoke_time))

        logger.trace("Rescheduling {} in {}", self._name, remaining)
        self._start_timer(max(0.0, remaining))
        return self._result

    def _trailing_edge(self, now: float) -> Any:
        self._timer = None

        # Arguments are only held if a call arrived since the last invocation.
        if self._config.trailing and self._last_args is not None:
            return self._invoke(now, "trailing")

        self._last_args = None
        return self._result

    def _invoke(self, now: float, edge: str) -> Any:
        args, kwargs = self._last_args
        self._last_args = None
        self._last_invoke_time = now

        logger.debug("Invoking {} on {} edge", self._name, edge)
        result = self._func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = self._track(result)

        self._result = result
        return result

    def _track(self, awaitable: Any) -> Any:
        # Without a running loop the awaitable is handed back untouched.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return awaitable

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            task.get_loop().call_exception_handler(
                {
                    "message": f"Exception in debounced coroutine {self._name}",
                    "exception": exc,
                    "future": task,
                }
            )

    @property
    def _name(self) -> str:
        return getattr(self._func, "__qualname__", repr(self._func))

    def __enter__(self) -> DebounceController:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    async def __aenter__(self) -> DebounceController:
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DebounceController(func={self._name}, "
            f"wait={self._config.wait}, "
            f"max_wait={self._config.max_wait}, "
            f"leading={self._config.leading}, "
            f"trailing={self._config.trailing}, "
            f"pending={self.pending()}, "
            f"closed={self.closed})"
        )
