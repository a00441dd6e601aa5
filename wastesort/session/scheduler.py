"""
Schedulers - Cancellable one-shot timers for the session.

The engine never sleeps. Everything time-based (clock ticks, pool refills,
delayed replacements) is a callback scheduled through a Scheduler, and
every scheduled task can be cancelled.

Two implementations:
- ManualScheduler: virtual time advanced explicitly (tests, simulations)
- AsyncioScheduler: real time on an asyncio event loop (HTTP service)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable
import asyncio
import heapq
import itertools


class ScheduledTask(ABC):
    """Handle of a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback. Cancelling twice, or after firing, is a no-op."""
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """
    Abstract scheduler.

    call_later(delay, callback) runs callback once, delay seconds from now,
    unless the returned task is cancelled first.
    """

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> ScheduledTask:
        pass

    @abstractmethod
    def time(self) -> float:
        """Current time of the scheduler, in seconds."""
        pass


# =============================================================================
# Manual (virtual time)
# =============================================================================

@dataclass
class ManualTask(ScheduledTask):
    """Task of a ManualScheduler."""
    due: float
    callback: Callable[[], Any]
    _cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by advance().

    Usage:
        scheduler = ManualScheduler()
        controller = SessionController(config, scheduler=scheduler)
        controller.start()
        scheduler.advance(3.0)  # fires every task due in the next 3 seconds

    Tasks due at the same time fire in scheduling order.
    """
    now: float = 0.0
    _queue: list[tuple[float, int, ManualTask]] = field(default_factory=list)
    _counter: Any = field(default_factory=itertools.count)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> ManualTask:
        task = ManualTask(due=self.now + max(0.0, delay), callback=callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    def time(self) -> float:
        return self.now

    @property
    def pending(self) -> list[ManualTask]:
        """Tasks that have neither fired nor been cancelled, by due time."""
        return [task for _, _, task in sorted(self._queue) if not task.cancelled]

    def advance(self, seconds: float) -> int:
        """
        Move virtual time forward, firing due tasks in order.

        Callbacks may schedule new tasks; those fire too if they fall inside
        the window. Returns the number of callbacks run.
        """
        if seconds < 0:
            raise ValueError("Cannot move time backwards")
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = due
            task.fired = True
            task.callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Fire tasks until nothing is pending."""
        fired = 0
        while self.pending:
            if fired >= max_callbacks:
                raise RuntimeError("Scheduler did not become idle")
            next_due = self.pending[0].due
            fired += self.advance(next_due - self.now)
        return fired


# =============================================================================
# Asyncio (real time)
# =============================================================================

class AsyncioTask(ScheduledTask):
    """Wraps an asyncio.TimerHandle."""

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler on an asyncio event loop.

    All callbacks run on the loop thread, one at a time, which is what
    serializes access to the session state.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> AsyncioTask:
        return AsyncioTask(self.loop.call_later(max(0.0, delay), callback))

    def time(self) -> float:
        return self.loop.time()
