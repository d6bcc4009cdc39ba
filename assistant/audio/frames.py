"""
Audio frame primitives.

Pure data containers only.
No queues, no timing logic.
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from audio.pcm import pcm16le_to_int16
from constants import AUDIO_SAMPLE_WIDTH_BYTES


@dataclass(frozen=True)
class Frame:
    """
    Fixed-length block of PCM16 samples handed to the wake-word engine.

    sequence_num:
        Monotonic per-assembler sequence number.
        Used for debugging and drop accounting only.

    pcm_bytes:
        Raw little-endian PCM16 bytes.
        Length MUST equal frame_length * AUDIO_SAMPLE_WIDTH_BYTES.
    """
    sequence_num: int
    pcm_bytes: bytes

    @property
    def samples(self) -> np.ndarray:
        """Signed 16-bit samples decoded from pcm_bytes."""
        return pcm16le_to_int16(self.pcm_bytes)

    def __len__(self) -> int:
        """Number of samples in the frame."""
        return len(self.pcm_bytes) // AUDIO_SAMPLE_WIDTH_BYTES
