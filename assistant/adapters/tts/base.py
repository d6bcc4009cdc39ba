"""
Speech synthesis adapter contract.

This module defines the *interface only*: no retries, timers, playback,
or orchestration decisions live here.

Key invariants:
- Input is plain text plus a voice selection.
- Output is encoded audio bytes (MP3) ready for the system player.
- Failures raise SynthesisError; the adapter never retries internally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from constants import TTS_LANGUAGE_CODE, TTS_VOICE_GENDER, TTS_VOICE_NAME


@dataclass(frozen=True)
class VoiceSelection:
    """
    Provider-neutral voice choice.

    language_code:
        BCP-47 code, e.g. "en-US".
    name:
        Provider voice name (Google voice name, ElevenLabs voice id).
    gender:
        "MALE", "FEMALE", or "NEUTRAL". Providers that select voices by
        name alone ignore it.
    """
    language_code: str = TTS_LANGUAGE_CODE
    name: str = TTS_VOICE_NAME
    gender: str = TTS_VOICE_GENDER


class SpeechSynthesisAdapter(ABC):
    """
    Abstract interface for a request/response text-to-speech service.

    Non-responsibilities:
    - No playback (see audio.playback)
    - No temp-file management
    - No fallback wording
    """

    @abstractmethod
    async def synthesize(self, text: str, *, voice: VoiceSelection) -> bytes:
        """
        Synthesize `text` with `voice`.

        Returns:
            MP3-encoded audio bytes (non-empty).

        Raises:
            SynthesisError on malformed credentials, network failure, or an
            empty response. `retryable` is set for transient failures.
        """
        raise NotImplementedError
