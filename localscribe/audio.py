"""
localscribe.audio - WAV ingestion for transcription.

Opens a PCM WAV container, enforces the 16kHz / mono / 16-bit contract,
decodes every sample and normalizes it to float32 in [-1.0, 1.0).
No resampling or channel mixing is ever attempted.
"""

from __future__ import annotations

import os
import struct
from pathlib import Path

import numpy as np
import soundfile as sf
from pydantic import BaseModel, ConfigDict, Field

from localscribe.exceptions import AudioDecodeError, AudioOpenError, UnsupportedAudioFormatError
from localscribe.logging import get_logger

log = get_logger("audio")

REQUIRED_SAMPLE_RATE = 16000
REQUIRED_CHANNELS = 1
REQUIRED_SUBTYPE = "PCM_16"
BYTES_PER_SAMPLE = 2
INT16_SCALE = 32768.0

# plain and WAVE_FORMAT_EXTENSIBLE headers
WAV_FORMATS = {"WAV", "WAVEX"}


class AudioClip(BaseModel):
    """Decoded audio ready for inference."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    sample_rate: int = Field(gt=0)
    channels: int = Field(gt=0)
    samples: np.ndarray

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate


def normalize_samples(samples: np.ndarray) -> np.ndarray:
    """Map signed 16-bit samples onto float32 via ``s / 32768.0``.

    +32767 lands just below 1.0; the asymmetry comes from the integer encoding.
    """
    return samples.astype(np.float32) / np.float32(INT16_SCALE)


def declared_data_size(audio_path: Path) -> int:
    """Return the byte length the RIFF header declares for the data chunk.

    libsndfile clamps a short data chunk to what is on disk, so truncation
    is only visible by comparing against the header's own claim.
    """
    with open(audio_path, "rb") as f:
        riff = f.read(12)
        if len(riff) < 12 or riff[:4] not in (b"RIFF", b"RIFX") or riff[8:12] != b"WAVE":
            raise ValueError("missing RIFF/WAVE header")
        size_format = "<I" if riff[:4] == b"RIFF" else ">I"

        while True:
            header = f.read(8)
            if len(header) < 8:
                raise ValueError("no data chunk")
            chunk_id = header[:4]
            (size,) = struct.unpack(size_format, header[4:])
            if chunk_id == b"data":
                return size
            f.seek(size + (size & 1), os.SEEK_CUR)


def read_wav(audio_path: Path | str) -> AudioClip:
    """Read a 16kHz mono 16-bit WAV file into an AudioClip.

    Args:
        audio_path: Path to the WAV file

    Returns:
        AudioClip with normalized float32 samples in file order

    Raises:
        AudioOpenError: If the file cannot be opened or its header parsed
        UnsupportedAudioFormatError: If rate, channels or sample format differ
        AudioDecodeError: If the sample stream is truncated or unreadable
    """
    audio_path = Path(audio_path)
    log.debug("Audio path: %s", audio_path)

    try:
        info = sf.info(str(audio_path))
    except (OSError, RuntimeError) as e:
        raise AudioOpenError(audio_path, str(e) or type(e).__name__) from e

    if info.format not in WAV_FORMATS:
        raise AudioOpenError(audio_path, f"not a WAV container ({info.format_info})")

    log.debug(
        "Audio spec: %d Hz, %d channel(s), %s, %d frames",
        info.samplerate,
        info.channels,
        info.subtype,
        info.frames,
    )

    if (
        info.samplerate != REQUIRED_SAMPLE_RATE
        or info.channels != REQUIRED_CHANNELS
        or info.subtype != REQUIRED_SUBTYPE
    ):
        raise UnsupportedAudioFormatError(
            audio_path, info.samplerate, info.channels, sample_format=info.subtype
        )

    try:
        with sf.SoundFile(str(audio_path)) as f:
            raw = f.read(dtype="int16")
        expected_bytes = declared_data_size(audio_path)
    except (OSError, RuntimeError, ValueError, struct.error) as e:
        raise AudioDecodeError(audio_path, str(e) or type(e).__name__) from e

    raw = np.asarray(raw).reshape(-1)
    if len(raw) * BYTES_PER_SAMPLE != expected_bytes:
        raise AudioDecodeError(
            audio_path,
            f"stream truncated: header declares {expected_bytes // BYTES_PER_SAMPLE} samples, "
            f"found {len(raw)}",
        )

    samples = normalize_samples(raw)
    log.debug("Loaded %d audio samples.", len(samples))

    return AudioClip(sample_rate=info.samplerate, channels=info.channels, samples=samples)
