"""
Schedulers - Injectable timing for cosmetic delays.

Engines never sleep. Anything that happens "a moment later" (ending a
turn after an unplayable roll, auto-moving a single legal token, a bot's
thinking pause) is handed to a Scheduler as a callback. The callback
re-enters the engine through the same synchronous path as any action.

Implementations:
- ImmediateScheduler: runs callbacks right away, in FIFO order
- ManualScheduler: holds callbacks until a test advances its clock
- AsyncioScheduler: real delays on an asyncio event loop
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Callable
import asyncio
import itertools

Callback = Callable[[], None]


class Scheduler(ABC):
    """Runs a callback after a delay, on the engine's own thread."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback):
        """Schedule `callback` to run after `delay` seconds."""
        pass


class ImmediateScheduler(Scheduler):
    """
    Headless scheduler that ignores delays.

    Callbacks are queued and drained in order. A callback scheduled while
    another one is running waits for it to return, so long chains of bot
    turns run as a loop instead of growing the call stack.
    """

    def __init__(self):
        self._queue: deque[Callback] = deque()
        self._draining = False

    def call_later(self, delay: float, callback: Callback):
        self._queue.append(callback)
        if self._draining:
            return

        self._draining = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._draining = False


@dataclass(order=True)
class _Pending:
    due: float
    seq: int
    callback: Callback = field(compare=False)


class ManualScheduler(Scheduler):
    """
    Test scheduler with a virtual clock.

    Usage:
        scheduler = ManualScheduler()
        engine = RaceEngine(scheduler=scheduler, ...)
        engine.apply(roll)
        scheduler.advance(3.0)   # fire everything due within 3 seconds
    """

    def __init__(self):
        self.now = 0.0
        self._pending: list[_Pending] = []
        self._seq = itertools.count()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def call_later(self, delay: float, callback: Callback):
        self._pending.append(_Pending(self.now + max(delay, 0.0), next(self._seq), callback))

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing callbacks that fall due. Returns the count fired."""
        deadline = self.now + seconds
        fired = 0
        while True:
            due = [p for p in self._pending if p.due <= deadline]
            if not due:
                break
            item = min(due)
            self._pending.remove(item)
            self.now = max(self.now, item.due)
            item.callback()
            fired += 1
        self.now = deadline
        return fired

    def run_next(self) -> bool:
        """Fire the earliest pending callback. Returns False if none are pending."""
        if not self._pending:
            return False
        item = min(self._pending)
        self._pending.remove(item)
        self.now = max(self.now, item.due)
        item.callback()
        return True

    def run_all(self, limit: int = 10_000) -> int:
        """Fire callbacks until none remain or `limit` is reached."""
        fired = 0
        while fired < limit and self.run_next():
            fired += 1
        return fired


class AsyncioScheduler(Scheduler):
    """
    Real-delay scheduler for interactive deployments.

    Callbacks run on the event loop thread, so the engine keeps a single
    writer without locks.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback):
        self.loop.call_later(max(delay, 0.0), callback)
