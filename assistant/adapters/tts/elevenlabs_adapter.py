"""
ElevenLabs TTS adapter.

Role in the system:
- Receives the full reply text from the orchestrator.
- Streams MP3 audio from the ElevenLabs API and joins it.
- Returns MP3 bytes.

Architectural constraints:
- No retries, timers, or playback here.
- `voice.name` is the ElevenLabs voice id; language and gender are
  determined by the voice itself.
"""

from __future__ import annotations

from typing import Any

import httpx
from elevenlabs.client import AsyncElevenLabs
from elevenlabs.core.api_error import ApiError

from adapters.errors import SynthesisError
from adapters.tts.base import SpeechSynthesisAdapter, VoiceSelection
from constants import ELEVENLABS_MODEL_ID, ELEVENLABS_OUTPUT_FORMAT


class ElevenLabsTTSAdapter(SpeechSynthesisAdapter):
    """
    ElevenLabs text-to-speech, MP3 output.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model_id: str = ELEVENLABS_MODEL_ID,
        client: Any | None = None,
    ) -> None:
        self._model_id = model_id
        self._client = client or AsyncElevenLabs(api_key=api_key)

    async def synthesize(self, text: str, *, voice: VoiceSelection) -> bytes:
        if not text.strip():
            raise SynthesisError("Nothing to synthesize")

        audio = bytearray()
        try:
            async for chunk in self._client.text_to_speech.convert(
                voice_id=voice.name,
                model_id=self._model_id,
                text=text,
                output_format=ELEVENLABS_OUTPUT_FORMAT,
            ):
                if chunk:
                    audio.extend(chunk)
        except ApiError as exc:
            status = exc.status_code or 0
            raise SynthesisError(
                f"ElevenLabs synthesis failed ({status}): {exc.body}",
                retryable=status == 429 or status >= 500,
            ) from exc
        except httpx.TransportError as exc:
            raise SynthesisError(
                f"No response received from ElevenLabs: {exc}",
                retryable=True,
            ) from exc

        if not audio:
            raise SynthesisError("ElevenLabs returned no audio")
        return bytes(audio)
