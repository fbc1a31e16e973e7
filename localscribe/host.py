"""
localscribe.host - Model Host.

Owns the single loaded inference engine for the process and serializes
access to it. Build one ModelHost at startup and pass it to every request;
a load failure at that point is fatal.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from localscribe.engine import InferenceEngine, InferenceSession
from localscribe.exceptions import InferenceError, LocalscribeError, ModelLoadError
from localscribe.logging import get_logger

log = get_logger("host")

T = TypeVar("T")

EngineFactory = Callable[..., InferenceEngine]


def default_engine_factory(model_path: Path, n_threads: int | None = None) -> InferenceEngine:
    """Load the bundled whisper.cpp engine."""
    from localscribe.engine.whispercpp import WhisperCppEngine

    return WhisperCppEngine(model_path, n_threads=n_threads)


class ModelHost:
    """Exclusive-access gate around one loaded engine."""

    def __init__(self, engine: InferenceEngine, model_path: Path | None = None):
        self._engine = engine
        self._lock = threading.Lock()
        self.model_path = model_path

    @classmethod
    def initialize(
        cls,
        model_path: Path | str,
        n_threads: int | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> ModelHost:
        """Load the model at ``model_path`` and wrap it in a host.

        Raises:
            ModelLoadError: If the model is missing, corrupt or incompatible
        """
        model_path = Path(model_path)
        factory = engine_factory or default_engine_factory

        try:
            engine = factory(model_path, n_threads=n_threads)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(model_path, str(e) or type(e).__name__) from e

        log.info("Model ready: %s", model_path)
        return cls(engine, model_path=model_path)

    @contextmanager
    def exclusive_session(self, audio_path: Path | str = "<memory>") -> Iterator[InferenceSession]:
        """Hold the gate and yield a fresh session bound to the model.

        Blocks until no other caller holds the gate. Released on exit,
        whether the block returns or raises.
        """
        with self._lock:
            try:
                session = self._engine.create_session()
            except LocalscribeError:
                raise
            except Exception as e:
                raise InferenceError(audio_path, f"could not create session: {e}") from e
            yield session

    def with_exclusive_access(
        self,
        fn: Callable[[InferenceSession], T],
        audio_path: Path | str = "<memory>",
    ) -> T:
        """Invoke ``fn`` with a fresh session while holding exclusive access."""
        with self.exclusive_session(audio_path) as session:
            return fn(session)
