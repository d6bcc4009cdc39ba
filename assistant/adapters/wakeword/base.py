"""
Wake-word engine contract.

The engine is an opaque native detector:
- constructed with credentials, exactly one keyword, and its sensitivity
- consumes fixed-size PCM16 frames of `frame_length` samples
- reports the matched keyword index, or -1 for no match
- must be released to free native resources
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


class WakeWordInitError(RuntimeError):
    """Raised when the wake-word engine cannot be constructed. Fatal at startup."""


class WakeWordEngineError(RuntimeError):
    """Raised when the engine fails while processing a frame. Fatal at runtime."""


@runtime_checkable
class WakeWordEngine(Protocol):
    """Structural interface satisfied by PorcupineEngine and test fakes."""

    @property
    def frame_length(self) -> int:
        """Samples per frame the engine expects."""
        ...

    @property
    def sample_rate(self) -> int:
        """Sample rate the engine expects (16000)."""
        ...

    def process(self, pcm: Sequence[int]) -> int:
        """Return the matched keyword index, or -1."""
        ...

    def release(self) -> None:
        """Free native resources. Idempotent."""
        ...
