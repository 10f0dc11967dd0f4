"""Debounced execution: collapse a burst of triggers into one call.

Each ``trigger`` cancels the pending call and schedules a new one after
``delay`` seconds, so only the arguments of the last trigger in a burst are
ever acted on.  The timer class is injectable; tests pass a manual timer.
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Tuple


class Debouncer:
    def __init__(
        self,
        delay: float,
        action: Callable[..., Any],
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._action = action
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending: Optional[Tuple[Any, ...]] = None
        # Bumped on every schedule/cancel; a timer firing with a stale
        # generation lost a race with cancel() and must do nothing.
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, *args: Any) -> None:
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._pending = args
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            args = self._take()
        if args is None:
            return False
        self._action(*args)
        return True

    def cancel(self) -> None:
        with self._lock:
            self._take()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            args = self._take()
        if args is not None:
            self._action(*args)

    def _take(self) -> Optional[Tuple[Any, ...]]:
        self._cancel_timer()
        self._generation += 1
        args, self._pending = self._pending, None
        return args

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
