from .rate_monitor import METRICS_UPDATED, TRACKING_ENDED, TRACKING_STARTED, MonitorState, RateMonitor
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle
from .speed import SpeedMetrics, TokenArrival, compute_speed, evict_expired
