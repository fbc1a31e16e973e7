"""
localscribe.engine.base - Engine and session protocols.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceSession(Protocol):
    """A stateful transcription pass bound to one loaded model.

    Sessions are created by the Model Host under exclusive access and
    never outlive that access.
    """

    def run(self, samples: np.ndarray) -> None:
        """Run inference over the full float32 sample sequence (16kHz mono)."""
        ...

    def segment_count(self) -> int:
        """Number of segments produced by the last run."""
        ...

    def segment_text(self, index: int) -> str | None:
        """Text of segment ``index``, or None if that segment is unavailable."""
        ...


class InferenceEngine(Protocol):
    """A loaded speech-recognition model."""

    def create_session(self) -> InferenceSession:
        ...
