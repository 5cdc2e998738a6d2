"""
Callback schedulers.

The engine never sleeps or spawns threads. It asks a Scheduler to call it
back after a delay and keeps the returned handle so it can cancel it.
All callbacks run on the thread that drives the scheduler, so engine state
is only ever touched from one thread.
"""

import heapq
import itertools
import sched
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..utils.time import ManualClock

Callback = Callable[[], None]


class TimerHandle:
    """Cancellable reference to a scheduled callback."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self.cancelled = False
        self.fired = False
        self._on_cancel: Optional[Callable[["TimerHandle"], None]] = None

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        """Invalidate the callback. Safe to call more than once."""
        if not self.pending:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel(self)


class Scheduler(ABC):
    """Delivers one-shot callbacks on the control thread."""

    @abstractmethod
    def call_later(self, delay_seconds: float, callback: Callback,
                   label: str = "") -> TimerHandle:
        """Run callback once after delay_seconds unless the handle is cancelled."""


class ManualScheduler(Scheduler):
    """Virtual-time scheduler that advances a ManualClock."""

    def __init__(self, clock: ManualClock) -> None:
        self.clock = clock
        self._elapsed = 0.0
        self._queue: list[tuple[float, int, TimerHandle, Callback]] = []
        self._seq = itertools.count()

    def call_later(self, delay_seconds: float, callback: Callback,
                   label: str = "") -> TimerHandle:
        handle = TimerHandle(label)
        due = self._elapsed + max(0.0, delay_seconds)
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))
        return handle

    def pending(self, label: Optional[str] = None) -> list[TimerHandle]:
        """Handles still waiting to fire, optionally filtered by label."""
        return [
            entry[2] for entry in sorted(self._queue)
            if entry[2].pending and (label is None or entry[2].label == label)
        ]

    def advance(self, seconds: float) -> int:
        """
        Move virtual time forward, firing due callbacks in order.

        Returns:
            Number of callbacks fired
        """
        target = self._elapsed + seconds
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if not handle.pending:
                continue
            self.clock.advance(due - self._elapsed)
            self._elapsed = due
            handle.fired = True
            callback()
            fired += 1

        self.clock.advance(target - self._elapsed)
        self._elapsed = target
        return fired


class LoopScheduler(Scheduler):
    """
    Blocking event loop built on sched, run in the calling thread.

    Deadlines are wall-clock instants and no single sleep exceeds
    max_sleep_seconds, so a callback that fell due while the machine was
    suspended runs shortly after it resumes.
    """

    def __init__(self, max_sleep_seconds: float = 60.0,
                 timefunc: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.max_sleep_seconds = max_sleep_seconds
        self._sleep = sleep
        self._scheduler = sched.scheduler(timefunc, self._bounded_sleep)

    def _bounded_sleep(self, seconds: float) -> None:
        self._sleep(min(seconds, self.max_sleep_seconds))

    def call_later(self, delay_seconds: float, callback: Callback,
                   label: str = "") -> TimerHandle:
        handle = TimerHandle(label)

        def fire() -> None:
            if handle.pending:
                handle.fired = True
                callback()

        event = self._scheduler.enter(max(0.0, delay_seconds), 0, fire)

        def drop(_: TimerHandle) -> None:
            if event in self._scheduler.queue:
                self._scheduler.cancel(event)

        handle._on_cancel = drop
        return handle

    def run(self) -> None:
        """Process callbacks until none are left."""
        self._scheduler.run()

    def empty(self) -> bool:
        return self._scheduler.empty()
