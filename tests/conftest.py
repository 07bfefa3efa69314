"""Shared test fixtures."""

from __future__ import annotations

import os
import threading

import pytest

# Widget tests must run on headless CI machines
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeSink:
    """Note sink that records every call with a timestamp."""

    def __init__(self, clock=None) -> None:
        import time

        self._clock = clock or time.perf_counter
        self.calls: list[tuple[str, int, int, float]] = []
        self._lock = threading.Lock()

    def note_on(self, pitch: int, velocity: int) -> None:
        with self._lock:
            self.calls.append(("on", pitch, velocity, self._clock()))

    def note_off(self, pitch: int) -> None:
        with self._lock:
            self.calls.append(("off", pitch, 0, self._clock()))

    def close(self) -> None:
        pass

    @property
    def messages(self) -> list[tuple[str, int, int]]:
        with self._lock:
            return [(kind, pitch, vel) for kind, pitch, vel, _ in self.calls]


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    """ConfigManager in a temp dir, recordings under tmp_path/recordings."""
    from vpiano.core.config import ConfigManager

    cfg = ConfigManager(config_dir=tmp_path / "config")
    cfg.set("recordings.directory", str(tmp_path / "recordings"))
    cfg.set("live.hold_ms", 50)
    return cfg
