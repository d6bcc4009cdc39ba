# pyright: reportUnknownMemberType=false
"""
Whisper API transcription adapter.

This module is deliberately "dumb":
- Accepts a complete WAV utterance as bytes
- Uploads it to the OpenAI transcription endpoint
- Returns the recognized text

Must NOT:
- Retry (the orchestrator owns retry policy)
- Decide what to say on failure
- Touch the conversation state
"""

from __future__ import annotations

from typing import Any

import openai

from adapters.asr.base import TranscriptionAdapter
from adapters.errors import TranscriptionError
from adapters.openai_client import map_openai_error
from constants import (
    TRANSCRIPTION_CONTENT_TYPE,
    TRANSCRIPTION_FILENAME,
    TRANSCRIPTION_MODEL,
)


class WhisperAPITranscriber(TranscriptionAdapter):
    """
    Transcription via `client.audio.transcriptions.create`.

    Args:
        client: openai.AsyncOpenAI (or compatible) instance.
        model: Transcription model identifier.
    """

    def __init__(self, *, client: Any, model: str = TRANSCRIPTION_MODEL) -> None:
        self._client = client
        self._model = model

    async def transcribe(self, audio: bytes, *, language: str) -> str:
        if not audio:
            raise TranscriptionError("Audio input is empty")

        try:
            result = await self._client.audio.transcriptions.create(
                model=self._model,
                file=(TRANSCRIPTION_FILENAME, audio, TRANSCRIPTION_CONTENT_TYPE),
                language=language,
            )
        except openai.OpenAIError as exc:
            raise map_openai_error(exc, TranscriptionError, "Transcription") from exc

        text = getattr(result, "text", None)
        if not isinstance(text, str):
            raise TranscriptionError(
                f"Malformed transcription response: {type(result).__name__}"
            )
        return text.strip()
