"""Decorator API for applying debounce and throttle behavior to functions."""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar, cast, overload

from quell.config import DebounceConfig
from quell.controller import DebounceController
from quell.timing import Clock, Scheduler

F = TypeVar("F", bound=Callable[..., Any])


def _bind(
    fn: F,
    config: DebounceConfig,
    clock: Clock | None,
    scheduler: Scheduler | None,
) -> F:
    controller = DebounceController(fn, config, clock=clock, scheduler=scheduler)

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return controller.call(*args, **kwargs)

    wrapper.controller = controller  # type: ignore[attr-defined]
    wrapper.cancel = controller.cancel  # type: ignore[attr-defined]
    wrapper.flush = controller.flush  # type: ignore[attr-defined]
    wrapper.pending = controller.pending  # type: ignore[attr-defined]
    wrapper.close = controller.close  # type: ignore[attr-defined]

    return cast("F", wrapper)


@overload
def debounce(
    func: F,
    /,
) -> F: ...


@overload
def debounce(
    *,
    wait: float = 0.0,
    max_wait: float | None = None,
    leading: bool = False,
    trailing: bool = True,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> Callable[[F], F]: ...


def debounce(
    func: F | None = None,
    /,
    *,
    wait: float = 0.0,
    max_wait: float | None = None,
    leading: bool = False,
    trailing: bool = True,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> F | Callable[[F], F]:
    """Decorator that debounces calls to a function.

    Calling the decorated function records the arguments and returns the
    result of the most recent invocation (or the fresh result when the call
    itself triggers one). The original function runs with the arguments of
    the latest call once the calls go quiet for *wait*.

    If the function is a coroutine function, each invocation is wrapped in
    an ``asyncio`` task, which becomes the returned result.

    Args:
        func: The function to decorate (when used without parentheses).
        wait: Quiet-period interval, in seconds with the default clock.
        max_wait: Maximum time between invocations, or None for no limit.
        leading: Invoke on the first call of a burst.
        trailing: Invoke after the burst goes quiet.
        clock: Time source. Defaults to :func:`time.monotonic`.
        scheduler: Timer scheduler. Defaults to the running asyncio loop.

    Examples:
    ```python
        # With parentheses
        @debounce(wait=0.3)
        def save(document: str) -> None:
            store.write(document)

        # Without parentheses (defers to the next loop tick)
        @debounce
        def redraw() -> None:
            canvas.render()

        save("draft 1")
        save("draft 2")
        save.flush()  # store.write("draft 2")
    ```
    """
    config = DebounceConfig(wait=wait, max_wait=max_wait, leading=leading, trailing=trailing)

    def decorator(fn: F) -> F:
        return _bind(fn, config, clock, scheduler)

    if func is not None:
        return decorator(func)

    return decorator


@overload
def throttle(
    func: F,
    /,
) -> F: ...


@overload
def throttle(
    *,
    wait: float = 0.0,
    leading: bool = True,
    trailing: bool = True,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> Callable[[F], F]: ...


def throttle(
    func: F | None = None,
    /,
    *,
    wait: float = 0.0,
    leading: bool = True,
    trailing: bool = True,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> F | Callable[[F], F]:
    """Decorator that throttles calls to a function.

    A debounce whose ``max_wait`` equals *wait*: under continuous calls the
    function runs at most once per *wait*, on the leading edge of each
    window and once more at its end if calls arrived in between.

    Args:
        func: The function to decorate (when used without parentheses).
        wait: Minimum interval between invocations.
        leading: Invoke on the first call of a window.
        trailing: Invoke at the end of a window that saw further calls.
        clock: Time source. Defaults to :func:`time.monotonic`.
        scheduler: Timer scheduler. Defaults to the running asyncio loop.
    """
    config = DebounceConfig.throttle(wait, leading=leading, trailing=trailing)

    def decorator(fn: F) -> F:
        return _bind(fn, config, clock, scheduler)

    if func is not None:
        return decorator(func)

    return decorator
