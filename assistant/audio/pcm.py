"""PCM conversion utilities."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import soundfile as sf

from constants import AUDIO_CHANNELS, AUDIO_SAMPLE_RATE_HZ, AUDIO_SAMPLE_WIDTH_BYTES


def pcm16le_to_int16(pcm_bytes: bytes) -> np.ndarray:
    """
    Decode PCM16 little-endian mono bytes into an int16 array.

    No resampling. No channel mixing.

    Raises:
        ValueError if the input ends in a partial sample.
    """
    if len(pcm_bytes) % AUDIO_SAMPLE_WIDTH_BYTES != 0:
        raise ValueError(f"PCM16 input has a partial sample: {len(pcm_bytes)} bytes")

    return np.frombuffer(pcm_bytes, dtype="<i2")


def write_wav(
    path: Path,
    pcm_bytes: bytes,
    *,
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
) -> Path:
    """
    Write raw PCM16 mono bytes as a 16-bit WAV file.

    Returns the path written.
    """
    audio = pcm16le_to_int16(pcm_bytes).reshape(-1, AUDIO_CHANNELS)
    sf.write(str(path), audio, sample_rate_hz, subtype="PCM_16", format="WAV")
    return path
