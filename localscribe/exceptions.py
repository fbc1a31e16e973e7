"""
localscribe.exceptions - Custom exception classes.

All Localscribe-specific exceptions inherit from LocalscribeError.
Per-request failures inherit from TranscriptionError.
"""

from __future__ import annotations

from pathlib import Path


class LocalscribeError(Exception):
    """Base exception for all Localscribe errors."""

    pass


class ConfigError(LocalscribeError):
    """Configuration loading or validation error."""

    pass


class ModelLoadError(LocalscribeError):
    """Model file missing, corrupt, or not loadable by the engine."""

    def __init__(self, model_path: Path | str, message: str):
        self.model_path = Path(model_path)
        self.message = message
        super().__init__(f"Failed to load model '{self.model_path}': {message}")


class TranscriptionError(LocalscribeError):
    """Base class for errors raised while transcribing one audio file."""

    def __init__(self, audio_path: Path | str, message: str):
        self.audio_path = Path(audio_path)
        self.message = message
        super().__init__(message)


class AudioOpenError(TranscriptionError):
    """Audio file missing, unreadable, or not a WAV container."""

    def __init__(self, audio_path: Path | str, reason: str):
        super().__init__(audio_path, f"Could not open audio file '{audio_path}': {reason}")


class UnsupportedAudioFormatError(TranscriptionError):
    """Audio is not 16kHz mono 16-bit PCM."""

    def __init__(
        self,
        audio_path: Path | str,
        sample_rate: int,
        channels: int,
        sample_format: str = "PCM_16",
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_format = sample_format
        message = (
            f"Audio must be 16kHz mono, but got {sample_rate}Hz "
            f"with {channels} channel{'s' if channels != 1 else ''}"
        )
        if sample_format != "PCM_16":
            message += f" and {sample_format} samples (16-bit PCM required)"
        super().__init__(audio_path, message)


class AudioDecodeError(TranscriptionError):
    """Sample stream truncated or corrupt."""

    def __init__(self, audio_path: Path | str, reason: str):
        super().__init__(audio_path, f"Could not decode samples from '{audio_path}': {reason}")


class InferenceError(TranscriptionError):
    """Inference engine failed internally."""

    def __init__(self, audio_path: Path | str, reason: str):
        super().__init__(audio_path, f"Inference failed for '{audio_path}': {reason}")
