"""
localscribe.engine - Inference engine adapters.

The Model Host only talks to engines through the InferenceEngine protocol;
whisper.cpp (via pywhispercpp) is the bundled implementation.
"""

from __future__ import annotations

from localscribe.engine.base import InferenceEngine, InferenceSession

__all__ = ["InferenceEngine", "InferenceSession"]
