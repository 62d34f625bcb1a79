"""
Sliding-window speed calculation.

Turns a bursty stream of token-count arrivals into three figures:
current speed over a short trailing window, whole-session average,
and a peak that only ratchets up.
"""

from collections import deque
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True)
class TokenArrival:
    count: int
    timestamp: float     # ms, same clock as the monitor


@dataclass
class SpeedMetrics:
    current_speed: float = 0.0   # tokens/second over the retention window
    average_speed: float = 0.0   # tokens/second over the whole session
    peak_speed: float = 0.0      # highest current_speed seen this session
    total_tokens: int = 0
    elapsed_time: float = 0.0    # seconds since start_tracking

    def copy(self) -> "SpeedMetrics":
        return replace(self)

    def to_dict(self) -> dict:
        return asdict(self)


def evict_expired(arrivals: deque, now: float, window_ms: float) -> None:
    """Drop arrivals at or before now - window_ms. Timestamps are ascending."""
    cutoff = now - window_ms
    while arrivals and arrivals[0].timestamp <= cutoff:
        arrivals.popleft()


def compute_speed(
    metrics: SpeedMetrics,
    arrivals,
    started_at: float,
    now: float,
) -> SpeedMetrics:
    """
    Recompute a snapshot from the window buffer.

    Returns a new SpeedMetrics; the inputs are not modified. Speeds keep
    their previous values when no time has passed since the session start,
    and current_speed only moves once the window holds two or more points.
    """
    result = metrics.copy()
    elapsed = (now - started_at) / 1000
    result.elapsed_time = elapsed

    if elapsed <= 0:
        return result

    if len(arrivals) > 1:
        recent_tokens = sum(a.count for a in arrivals)
        time_span = (now - arrivals[0].timestamp) / 1000
        if time_span > 0:
            result.current_speed = recent_tokens / time_span

    result.average_speed = result.total_tokens / elapsed
    result.peak_speed = max(result.peak_speed, result.current_speed)
    return result
