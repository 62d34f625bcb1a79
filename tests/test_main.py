"""Tests for the CLI entrypoint."""

import subprocess
import sys

import pytest

from speedometer.main import format_summary, simulated_stream
from speedometer.monitor.speed import SpeedMetrics


def test_help_flag():
    result = subprocess.run(
        [sys.executable, "-m", "speedometer.main", "--help"],
        capture_output=True, text=True,
    )
    assert result.returncode == 0
    assert "watch" in result.stdout
    assert "simulate" in result.stdout
    assert "serve" in result.stdout


def test_simulate_prints_summary():
    result = subprocess.run(
        [sys.executable, "-m", "speedometer.main", "simulate",
         "--tokens", "40", "--rate", "200", "--burst", "3", "--seed", "7"],
        capture_output=True, text=True, timeout=30,
    )
    assert result.returncode == 0
    assert "Done: 40 tokens" in result.stdout


def test_format_summary():
    m = SpeedMetrics(average_speed=12.34, peak_speed=20.0, total_tokens=50, elapsed_time=4.04)
    assert format_summary(m) == "50 tokens in 4.0s | avg 12.3 t/s | peak 20.0 t/s"


@pytest.mark.asyncio
async def test_simulated_stream_yields_all_tokens():
    chunks = [c async for c in simulated_stream(tokens=25, rate=5000, burst=4, seed=1)]
    assert sum(len(c.split()) for c in chunks) == 25
    assert all(1 <= len(c.split()) <= 4 for c in chunks)
