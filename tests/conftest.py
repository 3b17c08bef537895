"""Shared fixtures for quell tests."""

import pytest

from quell.config import DebounceConfig
from quell.controller import DebounceController
from quell.testing import VirtualClock, VirtualScheduler


class Recorder:
    """Target callable that remembers when and how it was invoked."""

    def __init__(self, clock):
        self.clock = clock
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((self.clock(), args, kwargs))
        return args[0] if args else None

    @property
    def times(self):
        return [t for t, _, _ in self.calls]

    @property
    def args(self):
        return [a[0] if a else None for _, a, _ in self.calls]


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def scheduler(clock):
    return VirtualScheduler(clock)


@pytest.fixture
def recorder(clock):
    return Recorder(clock)


@pytest.fixture
def make_controller(recorder, clock, scheduler):
    def factory(**options):
        return DebounceController(recorder, DebounceConfig(**options), clock=clock, scheduler=scheduler)

    return factory
