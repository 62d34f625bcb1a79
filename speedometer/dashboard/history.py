"""
Speed history for the details view.

Listens to a RateMonitor and keeps the last few (elapsed, speed)
points plus the latest snapshot, ready to be served as JSON.
"""

from collections import deque

from ..monitor.rate_monitor import METRICS_UPDATED, TRACKING_ENDED, TRACKING_STARTED
from ..monitor.speed import SpeedMetrics


class SpeedHistory:
    def __init__(self, monitor, max_points: int = 60):
        self.monitor = monitor
        self.points: deque[dict] = deque(maxlen=max_points)
        self.metrics: SpeedMetrics | None = None
        self.status: str | None = None     # None, "tracking" or "complete"
        self.model: str | None = None

        monitor.on(TRACKING_STARTED, self._on_started)
        monitor.on(METRICS_UPDATED, self._on_metrics)
        monitor.on(TRACKING_ENDED, self._on_ended)

    def _on_started(self, payload: dict):
        self.points.clear()
        self.metrics = None
        self.status = "tracking"
        self.model = payload["model"]

    def _on_metrics(self, metrics: SpeedMetrics):
        self._record(metrics)

    def _on_ended(self, metrics: SpeedMetrics):
        self._record(metrics)
        self.status = "complete"

    def _record(self, metrics: SpeedMetrics):
        self.metrics = metrics
        self.points.append({"time": metrics.elapsed_time, "speed": metrics.current_speed})

    def snapshot(self) -> dict:
        return {
            "status": self.status,
            "model": self.model,
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "points": list(self.points),
        }

    def close(self):
        self.monitor.off(TRACKING_STARTED, self._on_started)
        self.monitor.off(METRICS_UPDATED, self._on_metrics)
        self.monitor.off(TRACKING_ENDED, self._on_ended)
