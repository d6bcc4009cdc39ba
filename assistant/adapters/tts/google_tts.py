# pyright: reportMissingTypeStubs=false
"""
Google Cloud Text-to-Speech adapter.

Role in the system:
- Receives the full reply text from the orchestrator.
- Performs one synthesize_speech call.
- Returns MP3 bytes.

Architectural constraints:
- No retries, timers, or playback here.
- The async client is created lazily on first use, inside the running
  event loop, and reused afterwards.
"""
from __future__ import annotations

from typing import Any

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import texttospeech
from google.oauth2 import service_account

from adapters.errors import SynthesisError
from adapters.tts.base import SpeechSynthesisAdapter, VoiceSelection

_TOKEN_URI = "https://oauth2.googleapis.com/token"

_RETRYABLE = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
)


class GoogleTTSAdapter(SpeechSynthesisAdapter):
    """
    Google Cloud TTS via service-account credentials supplied as values
    (not a key file).
    """

    def __init__(
        self,
        *,
        client_email: str,
        private_key: str,
        project_id: str | None,
        client: Any | None = None,
    ) -> None:
        self._client_email = client_email
        self._private_key = private_key
        self._project_id = project_id
        self._client = client

    async def synthesize(self, text: str, *, voice: VoiceSelection) -> bytes:
        if not text.strip():
            raise SynthesisError("Nothing to synthesize")

        client = self._get_client()

        try:
            gender = texttospeech.SsmlVoiceGender[voice.gender.upper()]
        except KeyError as exc:
            raise SynthesisError(f"Unknown voice gender: {voice.gender!r}") from exc

        try:
            response = await client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=voice.language_code,
                    name=voice.name,
                    ssml_gender=gender,
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding.MP3,
                ),
            )
        except google_exceptions.GoogleAPICallError as exc:
            raise SynthesisError(
                f"Speech synthesis failed: {type(exc).__name__}: {exc}",
                retryable=isinstance(exc, _RETRYABLE),
            ) from exc
        except auth_exceptions.GoogleAuthError as exc:
            raise SynthesisError(f"Google credentials rejected: {exc}") from exc

        audio = bytes(response.audio_content or b"")
        if not audio:
            raise SynthesisError("Speech synthesis returned no audio")
        return audio

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        try:
            credentials = service_account.Credentials.from_service_account_info({
                "type": "service_account",
                "client_email": self._client_email,
                "private_key": self._private_key,
                "token_uri": _TOKEN_URI,
                "project_id": self._project_id,
            })
        except (ValueError, auth_exceptions.GoogleAuthError) as exc:
            raise SynthesisError(f"Malformed Google credentials: {exc}") from exc

        self._client = texttospeech.TextToSpeechAsyncClient(credentials=credentials)
        return self._client
