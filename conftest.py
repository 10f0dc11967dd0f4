"""Shared fixtures: a manual timer so debounced writes fire only when a test says so."""
from __future__ import annotations

import pytest


class ManualTimer:
    """Stand-in for ``threading.Timer`` that never starts a thread."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Simulate the quiet period elapsing."""
        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    def __init__(self):
        self.created: list[ManualTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args=args, kwargs=kwargs)
        self.created.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.created if t.started and not t.cancelled]

    def elapse(self) -> None:
        for timer in self.live:
            timer.fire()


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()
