"""Real-time token generation speed monitoring."""

from .config import MonitorConfig, load_config
from .monitor import MonitorState, RateMonitor, SpeedMetrics

__version__ = "0.1.0"
