"""
Adapter failure types.

Every external-service adapter raises a subclass of AdapterError.
`retryable` marks transient failures (network, 5xx, rate limits) that the
orchestrator's retry policy may repeat; everything else is final.
"""

from __future__ import annotations


class AdapterError(RuntimeError):
    """Base class for external-service adapter failures."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class TranscriptionError(AdapterError):
    """Speech-to-text failed or returned nothing usable."""


class ChatError(AdapterError):
    """Chat completion failed or returned an empty reply."""


class SynthesisError(AdapterError):
    """Text-to-speech failed or returned no audio."""
