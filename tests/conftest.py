"""Shared fixtures for the test suite."""

import pytest

from speedometer.config import MonitorConfig
from speedometer.display.status import StatusIndicator
from speedometer.monitor.rate_monitor import RateMonitor
from speedometer.monitor.scheduler import Scheduler, TimerHandle


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class ManualScheduler(Scheduler):
    """Fires timers in due order as the shared clock is advanced."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self._timers: list[dict] = []
        self._seq = 0

    def _add(self, delay_ms, callback, interval_ms=None) -> TimerHandle:
        handle = TimerHandle()
        self._seq += 1
        self._timers.append({
            "due": self.clock.now + delay_ms,
            "seq": self._seq,
            "handle": handle,
            "callback": callback,
            "interval": interval_ms,
        })
        return handle

    def call_later(self, delay_ms, callback) -> TimerHandle:
        return self._add(delay_ms, callback)

    def call_every(self, interval_ms, callback) -> TimerHandle:
        return self._add(interval_ms, callback, interval_ms)

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t["handle"].cancelled)

    def advance(self, ms: float):
        target = self.clock.now + ms
        while True:
            live = [t for t in self._timers if not t["handle"].cancelled and t["due"] <= target]
            if not live:
                break
            timer = min(live, key=lambda t: (t["due"], t["seq"]))
            self.clock.now = timer["due"]
            if timer["interval"] is None:
                self._timers.remove(timer)
            else:
                timer["due"] += timer["interval"]
            timer["callback"]()
        self._timers = [t for t in self._timers if not t["handle"].cancelled]
        self.clock.now = target


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def config():
    return MonitorConfig()


@pytest.fixture
def indicator():
    return StatusIndicator(position="right")


@pytest.fixture
def monitor(config, scheduler, indicator, clock):
    m = RateMonitor(config=config, scheduler=scheduler, display=indicator, clock=clock)
    yield m
    m.dispose()


@pytest.fixture
def events(monitor):
    """Records every event the monitor emits as (name, payload) pairs."""
    recorded = []
    for name in ("tracking_started", "metrics_updated", "tracking_ended"):
        monitor.on(name, lambda payload, name=name: recorded.append((name, payload)))
    return recorded
