"""
Tick Schedulers
===============

Injectable timers that drive the simulation loop.

MODES:
======
1. ASYNCIO: ticks ride the running event loop (`loop.call_later`),
   the server-side analogue of an animation frame
2. MANUAL: deterministic fake time; nothing runs until `advance()` is
   called. Used by tests and headless stepping.

GUARANTEES:
===========
- One callback per call_later; callbacks never overlap
- A cancelled tick never runs
- No thread is ever started
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import asyncio
import heapq
import itertools


TickCallback = Callable[[], None]


class ScheduledTick(ABC):
    """Handle to a pending callback."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class TickScheduler(ABC):
    """Schedules a single callback after a delay in seconds."""

    @abstractmethod
    def call_later(self, delay: float, callback: TickCallback) -> ScheduledTick:
        pass


# =============================================================================
# ASYNCIO
# =============================================================================

class _TimerTick(ScheduledTick):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioTickScheduler(TickScheduler):
    """
    Schedules ticks on an asyncio event loop.

    The loop is resolved lazily so the scheduler can be built before the
    loop starts (e.g. at application import time).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: TickCallback) -> ScheduledTick:
        loop = self._loop or asyncio.get_running_loop()
        return _TimerTick(loop.call_later(delay, callback))


# =============================================================================
# MANUAL (fake time)
# =============================================================================

@dataclass(order=True)
class _ManualTick(ScheduledTick):
    due: float
    order: int
    callback: TickCallback = field(compare=False)
    _cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualTickScheduler(TickScheduler):
    """
    Fake-time scheduler.

    `advance(seconds)` runs every callback that falls due within the
    window, in due order, including callbacks scheduled by callbacks.
    """

    def __init__(self):
        self._now: float = 0.0
        self._queue: List[_ManualTick] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)

    def call_later(self, delay: float, callback: TickCallback) -> ScheduledTick:
        tick = _ManualTick(
            due=self._now + max(0.0, delay),
            order=next(self._counter),
            callback=callback,
        )
        heapq.heappush(self._queue, tick)
        return tick

    def advance(self, seconds: float) -> int:
        """Move fake time forward; returns the number of callbacks run."""
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= target:
            tick = heapq.heappop(self._queue)
            if tick.cancelled:
                continue
            self._now = tick.due
            tick.callback()
            ran += 1
        self._now = target
        return ran
