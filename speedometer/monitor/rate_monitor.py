"""
Token speed monitor.

Tracks one generation session at a time and publishes its throughput:

    start_tracking(model) -> add_tokens(n) ... -> stop_tracking()

While tracking, a broadcaster republishes the latest snapshot every
metrics_update_interval_ms. After a stop the display lingers for
post_tracking_display_ms (cooldown) before it is hidden.
"""

import logging
import time
from collections import deque
from collections.abc import Callable
from enum import Enum

from ..config import MonitorConfig
from ..display.icons import format_speed
from ..display.status import StatusIndicator
from ..events import EventEmitter
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle
from .speed import SpeedMetrics, TokenArrival, compute_speed, evict_expired

logger = logging.getLogger(__name__)

TRACKING_STARTED = "tracking_started"
METRICS_UPDATED = "metrics_updated"
TRACKING_ENDED = "tracking_ended"


class MonitorState(Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    COOLDOWN = "cooldown"


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateMonitor(EventEmitter):
    """
    Sliding-window token speed monitor.

    Events:
        tracking_started  {"model": str}, once per start_tracking
        metrics_updated   SpeedMetrics copy, every broadcaster tick while tracking
        tracking_ended    final SpeedMetrics copy, once per stop_tracking

    The display is injected; the monitor only shows, hides and sets its text.
    Out-of-state or invalid calls are ignored rather than raised.
    """

    def __init__(
        self,
        config: MonitorConfig | None = None,
        scheduler: Scheduler | None = None,
        display: StatusIndicator | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        super().__init__()
        self.config = config or MonitorConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.display = display or StatusIndicator(position=self.config.position)
        self._clock = clock

        self._state = MonitorState.IDLE
        self._model: str | None = None
        self._started_at = 0.0
        self._metrics = SpeedMetrics()
        self._buffer: deque[TokenArrival] = deque()
        self._last_display_update: float | None = None
        self._broadcaster: TimerHandle | None = None
        self._hide_timer: TimerHandle | None = None
        self._session = 0

    # --- Read-only views ---

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state is MonitorState.TRACKING

    @property
    def model(self) -> str | None:
        return self._model

    @property
    def session(self) -> int:
        """Increments on every start_tracking."""
        return self._session

    @property
    def metrics(self) -> SpeedMetrics:
        return self._metrics.copy()

    @property
    def retention_window_ms(self) -> float:
        return self.config.retention_window_ms

    @property
    def buffered_arrivals(self) -> list[TokenArrival]:
        return list(self._buffer)

    # --- Lifecycle ---

    def start_tracking(self, model: str):
        """
        Begin a new session, abandoning any session or cooldown in progress.

        The broadcaster is armed before anything else changes, so a
        scheduler failure (e.g. no running event loop) leaves the monitor
        as it was.
        """
        broadcaster = self.scheduler.call_every(
            self.config.metrics_update_interval_ms, self._broadcast
        )
        self._clear_timers()
        self._broadcaster = broadcaster
        self._session += 1
        self._state = MonitorState.TRACKING
        self._model = model
        self._started_at = self._clock()
        self.reset_metrics()
        self.display.show()

        logger.debug("Tracking started for %s", model)
        self.emit(TRACKING_STARTED, {"model": model})

    def add_tokens(self, count: int):
        if self._state is not MonitorState.TRACKING or count == 0:
            return
        if count < 0:
            logger.warning("Ignoring negative token count %d for %s", count, self._model)
            return

        now = self._clock()
        self._metrics.total_tokens += count
        self._buffer.append(TokenArrival(count=count, timestamp=now))
        self._recompute(now)
        self._throttled_update_display(now)

    def stop_tracking(self):
        """End the session; the display stays up until the cooldown runs out."""
        if self._state is MonitorState.TRACKING:
            # Settle elapsed time and average at the stop instant.
            self._recompute(self._clock())

        self._state = MonitorState.COOLDOWN
        self._clear_timers()
        logger.debug(
            "Tracking ended for %s: %d tokens in %.2fs",
            self._model, self._metrics.total_tokens, self._metrics.elapsed_time,
        )
        self.emit(TRACKING_ENDED, self._metrics.copy())

        self._hide_timer = self.scheduler.call_later(
            self.config.post_tracking_display_ms, self._end_cooldown
        )

    def reset_metrics(self):
        """Zero the snapshot and drop buffered arrivals. State and timers are untouched."""
        self._metrics = SpeedMetrics()
        self._buffer.clear()

    def dispose(self):
        """Cancel both timers and release the display. No timer fires afterwards."""
        self._clear_timers()
        self._state = MonitorState.IDLE
        self._buffer.clear()
        self.display.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()

    # --- Internals ---

    def _recompute(self, now: float):
        evict_expired(self._buffer, now, self.retention_window_ms)
        self._metrics = compute_speed(self._metrics, self._buffer, self._started_at, now)

    def _throttled_update_display(self, now: float):
        last = self._last_display_update
        if last is None or now - last >= self.config.display_throttle_ms:
            self._update_display()
            self._last_display_update = now

    def _update_display(self):
        if self._state is not MonitorState.TRACKING:
            return
        self.display.set_text(format_speed(self._metrics.current_speed, self.config.show_icon))

    def _broadcast(self):
        if self._state is MonitorState.TRACKING:
            self.emit(METRICS_UPDATED, self._metrics.copy())

    def _end_cooldown(self):
        self._hide_timer = None
        if self._state is MonitorState.COOLDOWN:
            self.display.hide()
            self._state = MonitorState.IDLE
            self._buffer.clear()
            logger.debug("Cooldown over, display hidden")

    def _clear_timers(self):
        if self._broadcaster is not None:
            self._broadcaster.cancel()
            self._broadcaster = None
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None
