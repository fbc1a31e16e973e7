"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import sys
import threading
import time
import types
from pathlib import Path
from typing import Callable

import numpy as np
import pytest
import soundfile as sf


def write_wav(
    path: Path,
    samples,
    sample_rate: int = 16000,
    channels: int = 1,
    subtype: str = "PCM_16",
    format: str = "WAV",
) -> Path:
    """Write samples to a WAV file; interleaved when channels > 1."""
    data = np.asarray(samples)
    if channels > 1:
        data = data.reshape(-1, channels)
    sf.write(str(path), data, sample_rate, subtype=subtype, format=format)
    return path


@pytest.fixture
def make_wav(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing WAV files into tmp_path."""

    def _make(name: str = "clip.wav", samples=None, **kwargs) -> Path:
        if samples is None:
            samples = np.zeros(16000, dtype=np.int16)
        return write_wav(tmp_path / name, samples, **kwargs)

    return _make


@pytest.fixture
def speech_samples() -> np.ndarray:
    """One second of a 440Hz tone standing in for speech."""
    t = np.arange(16000) / 16000
    return (np.sin(2 * np.pi * 440 * t) * 12000).astype(np.int16)


class FakeSession:
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine
        self.segments: list[str | None] = []

    def run(self, samples: np.ndarray) -> None:
        engine = self.engine
        with engine.stats_lock:
            engine.runs += 1
            engine.active += 1
            engine.max_active = max(engine.max_active, engine.active)
            start = time.monotonic()
        try:
            if engine.fail_with is not None:
                raise engine.fail_with
            time.sleep(engine.run_delay)
            engine.seen_samples.append(samples)
            self.segments = list(engine.segments_for(samples))
        finally:
            with engine.stats_lock:
                engine.active -= 1
                engine.intervals.append((start, time.monotonic()))

    def segment_count(self) -> int:
        return len(self.segments)

    def segment_text(self, index: int) -> str | None:
        return self.segments[index]


class FakeEngine:
    """Instrumented engine recording runs and overlapping sessions."""

    def __init__(self, segments_for=None, run_delay: float = 0.0):
        self.segments_for = segments_for or default_segments
        self.run_delay = run_delay
        self.fail_with: Exception | None = None
        self.sessions_created = 0
        self.runs = 0
        self.active = 0
        self.max_active = 0
        self.intervals: list[tuple[float, float]] = []
        self.seen_samples: list[np.ndarray] = []
        self.stats_lock = threading.Lock()

    def create_session(self) -> FakeSession:
        self.sessions_created += 1
        return FakeSession(self)


def default_segments(samples: np.ndarray) -> list[str]:
    if len(samples) == 0 or not np.any(samples):
        return []
    return [" Hello", " world."]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def host(fake_engine: FakeEngine):
    from localscribe.host import ModelHost

    return ModelHost(fake_engine, model_path=Path("fake.bin"))


@pytest.fixture
def ggml_model(tmp_path: Path) -> Path:
    """A file carrying the ggml magic, enough for the pre-load check."""
    path = tmp_path / "models" / "ggml-tiny.en.bin"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"lmgg" + b"\x00" * 64)
    return path


@pytest.fixture
def fake_pywhispercpp(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Install a stand-in pywhispercpp module recording constructor/transcribe calls."""
    calls: dict = {"init": [], "transcribe": []}

    class Model:
        def __init__(self, model, **kwargs):
            calls["init"].append((model, kwargs))

        def transcribe(self, media, **kwargs):
            calls["transcribe"].append((media, kwargs))
            return [types.SimpleNamespace(t0=0, t1=100, text=t) for t in default_segments(media)]

    package = types.ModuleType("pywhispercpp")
    model_module = types.ModuleType("pywhispercpp.model")
    model_module.Model = Model
    package.model = model_module
    monkeypatch.setitem(sys.modules, "pywhispercpp", package)
    monkeypatch.setitem(sys.modules, "pywhispercpp.model", model_module)
    return calls


@pytest.fixture
def make_engine() -> type[FakeEngine]:
    """Return the FakeEngine class for tests that need custom segments or delays."""
    return FakeEngine
