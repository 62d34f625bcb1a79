"""
Timer scheduling on the asyncio event loop.

The monitor never touches the loop directly: it asks a Scheduler for
one-shot and periodic timers and keeps the returned handles so it can
cancel them on stop, restart and dispose.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle:
    """Cancellable timer. cancel() is safe to call any number of times."""

    def __init__(self):
        self.cancelled = False
        self._loop_handle: asyncio.TimerHandle | None = None

    def cancel(self):
        self.cancelled = True
        if self._loop_handle is not None:
            self._loop_handle.cancel()
            self._loop_handle = None


class Scheduler(ABC):
    """Hands out cancellable timers. Delays and intervals are in milliseconds."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    @abstractmethod
    def call_every(self, interval_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by loop.call_later.

    Periodic timers re-arm themselves after each tick until cancelled, so
    a cancelled handle never fires again even if a tick was already queued.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def fire():
            if handle.cancelled:
                return
            handle._loop_handle = None
            callback()

        handle._loop_handle = self.loop.call_later(delay_ms / 1000, fire)
        return handle

    def call_every(self, interval_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()
        loop = self.loop

        def tick():
            if handle.cancelled:
                return
            handle._loop_handle = loop.call_later(interval_ms / 1000, tick)
            callback()

        handle._loop_handle = loop.call_later(interval_ms / 1000, tick)
        return handle
