"""Audio device failure types."""

from __future__ import annotations


class CaptureError(RuntimeError):
    """Raised when the capture device cannot be opened or read."""
