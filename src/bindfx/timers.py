"""Timer facilities: a clock plus schedule-after-delay with cancel.

Debouncers never touch a clock or a thread directly; they ask a Timers
instance. Pick the one matching the host:

- ThreadingTimers: daemon threading.Timer per call. Firing is routed through
  the thread scheduler (see set_scheduler) when one is installed; otherwise
  callbacks run on the timer thread and binding writes they make are
  serialized by the propagation lock.
- AsyncioTimers: loop.call_later on an asyncio event loop.
- ManualTimers: a virtual clock advanced by hand. Deterministic, for tests
  and frame-driven hosts.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Protocol

from bindfx.binding import call_on_owner


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timers(ABC):
    """Clock plus one-shot timers. Durations are in seconds."""

    @abstractmethod
    def now(self) -> float:
        """Current time on this facility's clock."""

    @abstractmethod
    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        """Call fn once after delay seconds. The handle's cancel() stops it."""


class ThreadingTimers(Timers):
    """One daemon thread per timer.

    Install set_scheduler() on the owner thread to have callbacks delivered
    there instead of on the timer thread.
    """

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, call_on_owner, args=[fn])
        timer.daemon = True
        timer.start()
        return timer


class AsyncioTimers(Timers):
    """Timers on an asyncio loop. Without a loop, uses the running one."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, fn: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, fn)


class _ManualHandle:
    __slots__ = ("when", "fn", "cancelled")

    def __init__(self, when: float, fn: Callable[[], None]) -> None:
        self.when = when
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers(Timers):
    """A virtual clock. Nothing fires until advance() moves time forward.

    Usage:
        timers = ManualTimers()
        timers.call_later(1.0, lambda: print("tick"))
        timers.advance(0.5)  # nothing
        timers.advance(0.5)  # tick
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._heap: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, fn: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self._now + max(delay, 0.0), fn)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in deadline order.

        Timers scheduled by a firing callback fire in the same call if they
        fall due before the new time.
        """
        if seconds < 0:
            raise ValueError("cannot advance time backwards")
        target = self._now + seconds
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = when
            handle.fn()
        self._now = target

    @property
    def pending_count(self) -> int:
        """Number of timers scheduled and not cancelled."""
        return sum(1 for _, _, handle in self._heap if not handle.cancelled)
