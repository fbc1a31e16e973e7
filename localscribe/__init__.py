"""
Localscribe - on-device speech-to-text for recorded audio clips.

Turns a 16kHz mono WAV file into text using a locally loaded whisper.cpp
model: audio validation → sample normalization → serialized inference →
segment assembly.
"""

__version__ = "0.1.0"
