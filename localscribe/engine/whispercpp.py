"""
localscribe.engine.whispercpp - whisper.cpp engine via pywhispercpp.

Loads a ggml model file once and runs greedy, temperature-0 decoding so that
exactly one hypothesis is produced and identical input gives identical text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from localscribe.exceptions import ModelLoadError
from localscribe.logging import get_logger

log = get_logger("engine.whispercpp")

# uint32 0x67676d6c stored little-endian
GGML_MAGIC = b"lmgg"

SAMPLING_GREEDY = 0

DECODING_PARAMS: dict[str, Any] = {
    "temperature": 0.0,
    "temperature_inc": 0.0,
    "print_progress": False,
    "print_realtime": False,
}


def check_model_file(model_path: Path) -> None:
    """Reject paths that are not readable ggml model files.

    Raises:
        ModelLoadError: If the file is missing, unreadable or lacks the ggml magic
    """
    if not model_path.is_file():
        raise ModelLoadError(model_path, "model file not found")
    try:
        with open(model_path, "rb") as f:
            magic = f.read(len(GGML_MAGIC))
    except OSError as e:
        raise ModelLoadError(model_path, f"model file unreadable: {e}") from e
    if magic != GGML_MAGIC:
        raise ModelLoadError(model_path, "not a whisper.cpp ggml model (bad magic)")


class WhisperCppSession:
    """One transcription pass against a shared pywhispercpp model."""

    def __init__(self, model: Any):
        self._model = model
        self._segments: list[Any] = []

    def run(self, samples: np.ndarray) -> None:
        self._segments = list(self._model.transcribe(np.ascontiguousarray(samples, dtype=np.float32)))

    def segment_count(self) -> int:
        return len(self._segments)

    def segment_text(self, index: int) -> str | None:
        if not 0 <= index < len(self._segments):
            return None
        return getattr(self._segments[index], "text", None)


class WhisperCppEngine:
    """whisper.cpp model loaded from a local ggml file.

    Never downloads: the path is checked before pywhispercpp sees it, since
    pywhispercpp treats unknown model names as downloadable.
    """

    def __init__(self, model_path: Path | str, n_threads: int | None = None):
        self.model_path = Path(model_path)
        check_model_file(self.model_path)

        try:
            from pywhispercpp.model import Model
        except ImportError as e:
            raise ModelLoadError(
                self.model_path,
                "pywhispercpp not installed. Install with: pip install pywhispercpp",
            ) from e

        params = dict(DECODING_PARAMS)
        if n_threads:
            params["n_threads"] = n_threads

        log.info("Loading model from: %s", self.model_path)
        try:
            self.model = Model(
                str(self.model_path),
                params_sampling_strategy=SAMPLING_GREEDY,
                redirect_whispercpp_logs_to=None,
                **params,
            )
        except Exception as e:
            raise ModelLoadError(self.model_path, str(e) or type(e).__name__) from e

    def create_session(self) -> WhisperCppSession:
        return WhisperCppSession(self.model)
