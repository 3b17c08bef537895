"""quell — debounce and throttle for Python callables.

Coalesces bursts of calls into a bounded number of invocations, keeping
only the latest arguments. ``max_wait`` guarantees progress under a
continuous stream of calls.

Basic usage:

    from quell import DebounceConfig, DebounceController

    controller = DebounceController(save, DebounceConfig(wait=0.3, max_wait=2.0))

    controller.call("draft 1")
    controller.call("draft 2")
    controller.flush()  # save("draft 2")

Decorator usage:

    from quell import debounce

    @debounce(wait=0.3)
    def save(document: str) -> None:
        store.write(document)

Logging goes through loguru and is disabled for this package by default;
call ``logger.enable("quell")`` to see it.
"""

from loguru import logger

from quell.config import DebounceConfig
from quell.controller import DebounceController
from quell.decorator import debounce, throttle
from quell.group import DebounceGroup
from quell.timing import Clock, LoopScheduler, Scheduler

__all__ = [
    "Clock",
    "DebounceConfig",
    "DebounceController",
    "DebounceGroup",
    "LoopScheduler",
    "Scheduler",
    "debounce",
    "throttle",
]

__version__ = "0.1.0"

logger.disable("quell")
