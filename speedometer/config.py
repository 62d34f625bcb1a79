"""
Speedometer configuration.

Loads the monitor settings from YAML, then lets environment variables
override the two display knobs and the upstream URL.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .display.status import POSITIONS

DEFAULT_CONFIG_PATH = "configs/speedometer.yaml"


@dataclass
class MonitorConfig:
    position: str = "right"
    show_icon: bool = True
    buffer_size: int = 10
    display_throttle_ms: float = 100.0
    post_tracking_display_ms: float = 5000.0
    metrics_update_interval_ms: float = 500.0
    history_points: int = 60
    upstream_url: str = "http://localhost:8001"

    def __post_init__(self):
        if self.position not in POSITIONS:
            raise ValueError(f"position must be one of {POSITIONS}, got {self.position!r}")
        for name in ("buffer_size", "display_throttle_ms", "post_tracking_display_ms",
                     "metrics_update_interval_ms", "history_points"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")

    @property
    def retention_window_ms(self) -> float:
        """How long an arrival counts towards current speed."""
        return self.buffer_size * self.display_throttle_ms


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: str | None = None) -> MonitorConfig:
    """
    Build a MonitorConfig from YAML (if present) and the environment.

    A missing file at the default path is fine; an explicit path that
    does not exist raises FileNotFoundError.
    """
    raw: dict = {}
    config_path = Path(path or os.getenv("SPEEDOMETER_CONFIG", DEFAULT_CONFIG_PATH))
    if config_path.exists():
        with open(config_path) as f:
            raw = (yaml.safe_load(f) or {}).get("speedometer", {})
    elif path is not None:
        raise FileNotFoundError(f"Config file not found: {path}")

    known = {f.name for f in fields(MonitorConfig)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown speedometer settings: {sorted(unknown)}")

    if "SPEEDOMETER_POSITION" in os.environ:
        raw["position"] = os.environ["SPEEDOMETER_POSITION"]
    if "SPEEDOMETER_SHOW_ICON" in os.environ:
        raw["show_icon"] = _env_bool(os.environ["SPEEDOMETER_SHOW_ICON"])
    if "UPSTREAM_URL" in os.environ:
        raw["upstream_url"] = os.environ["UPSTREAM_URL"]

    return MonitorConfig(**raw)
