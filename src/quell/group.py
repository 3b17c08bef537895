"""Keyed debouncing: one independent controller per key."""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable, Iterator
from typing import Any

from loguru import logger

from quell.config import DebounceConfig
from quell.controller import DebounceController
from quell.timing import Clock, LoopScheduler, Scheduler


class DebounceGroup:
    """Manages independent debounce state per key.

    Each key gets its own :class:`DebounceController` wrapping the same
    target, so a burst on one key never delays another. Controllers are
    created on first use and, when *idle_timeout* is set, discarded once
    they have nothing pending and have seen no call for that long.

    Args:
        func: Target callable shared by every key.
        config: Timing and edge policy applied to each key.
        clock: Time source shared by every controller.
        scheduler: Timer scheduler shared by every controller.
        idle_timeout: Idle time before a key's controller is pruned.
                      None keeps controllers until :meth:`close`.

    Example::

        group = DebounceGroup(save_pin_state, DebounceConfig(wait=0.05))

        group.call(17, "high")
        group.call(17, "low")
        group.call(22, "high")
        # after 50ms: save_pin_state("low") and save_pin_state("high")

        group.close()
    """

    __slots__ = (
        "_clock",
        "_closed",
        "_config",
        "_controllers",
        "_func",
        "_last_prune",
        "_scheduler",
        "idle_timeout",
    )

    def __init__(
        self,
        func: Callable[..., Any],
        config: DebounceConfig | None = None,
        *,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        idle_timeout: float | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")

        if idle_timeout is not None and idle_timeout <= 0:
            raise ValueError(f"idle_timeout must be positive or None, got {idle_timeout}")

        self._func = func
        self._config = config or DebounceConfig()
        self._clock: Clock = clock or time.monotonic
        self._scheduler: Scheduler = scheduler or LoopScheduler()
        self._controllers: dict[Hashable, DebounceController] = {}
        self._closed = False
        self._last_prune: float | None = None
        self.idle_timeout = idle_timeout

    @property
    def config(self) -> DebounceConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def call(self, key: Hashable, *args: Any, **kwargs: Any) -> Any:
        """Debounce a call for *key*."""
        self._ensure_open()
        if self._prune_due():
            self.prune()
        return self._get_or_create(key).call(*args, **kwargs)

    def cancel(self, key: Hashable) -> None:
        self._ensure_open()
        controller = self._controllers.get(key)
        if controller is not None:
            controller.cancel()

    def flush(self, key: Hashable) -> Any:
        self._ensure_open()
        controller = self._controllers.get(key)
        if controller is None:
            return None
        return controller.flush()

    def pending(self, key: Hashable) -> bool:
        self._ensure_open()
        controller = self._controllers.get(key)
        return controller is not None and controller.pending()

    def controller(self, key: Hashable) -> DebounceController | None:
        return self._controllers.get(key)

    def keys(self) -> list[Hashable]:
        return list(self._controllers)

    def prune(self) -> list[Hashable]:
        """Discard idle controllers and return their keys."""
        if self.idle_timeout is None:
            return []

        now = self._clock()
        self._last_prune = now
        to_remove: list[Hashable] = []
        for key, controller in self._controllers.items():
            if controller.pending():
                continue
            last_call = controller.last_call_time
            if last_call is None or now - last_call >= self.idle_timeout:
                to_remove.append(key)

        for key in to_remove:
            self._controllers.pop(key).close()

        if to_remove:
            logger.debug("Pruned {} idle debounce key(s)", len(to_remove))
        return to_remove

    def close(self) -> None:
        """Close every controller and forget all keys."""
        if self._closed:
            return
        self._closed = True
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()

    def _get_or_create(self, key: Hashable) -> DebounceController:
        controller = self._controllers.get(key)
        if controller is None:
            controller = DebounceController(
                self._func,
                self._config,
                clock=self._clock,
                scheduler=self._scheduler,
            )
            self._controllers[key] = controller
        return controller

    def _prune_due(self) -> bool:
        # Sweeps from call() run at most every half idle_timeout.
        if self.idle_timeout is None:
            return False
        if self._last_prune is None:
            return True
        return self._clock() - self._last_prune >= self.idle_timeout / 2

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("DebounceGroup is closed")

    def __contains__(self, key: object) -> bool:
        return key in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._controllers))

    def __enter__(self) -> DebounceGroup:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    async def __aenter__(self) -> DebounceGroup:
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DebounceGroup(keys={len(self._controllers)}, "
            f"wait={self._config.wait}, "
            f"max_wait={self._config.max_wait}, "
            f"closed={self._closed})"
        )
