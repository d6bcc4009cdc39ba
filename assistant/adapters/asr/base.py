"""
Transcription adapter contract.

This module defines the *interface only*: no retries, timers, or
orchestration decisions live here.

Key invariants:
- Input is a complete WAV utterance (PCM16, mono, 16 kHz) as bytes.
- Output is plain text.
- Failures raise TranscriptionError; the adapter never retries internally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from adapters.errors import TranscriptionError


class TranscriptionAdapter(ABC):
    """
    Abstract interface for a request/response speech-to-text service.

    Orchestrator responsibilities (NOT here):
    - Timeouts and retry policy
    - Deciding what to say when transcription fails
    """

    @abstractmethod
    async def transcribe(self, audio: bytes, *, language: str) -> str:
        """
        Transcribe one utterance.

        Args:
            audio: WAV file bytes (mono, 16 kHz).
            language: ISO-639-1 language hint, e.g. "en".

        Raises:
            TranscriptionError on empty input, network failure, or a
            malformed response. `retryable` is set for transient failures.
        """
        raise NotImplementedError


def read_utterance(path: Path) -> bytes:
    """
    Load a recorded utterance for upload.

    Raises:
        TranscriptionError if the file is missing, unreadable, or empty.
    """
    try:
        audio = path.read_bytes()
    except FileNotFoundError as exc:
        raise TranscriptionError(f"Audio file does not exist: {path}") from exc
    except OSError as exc:
        raise TranscriptionError(f"Audio file unreadable: {exc}") from exc

    if not audio:
        raise TranscriptionError(f"Audio file is empty: {path}")
    return audio
