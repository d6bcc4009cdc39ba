"""
Application configuration.

Responsibilities:
- Read environment variables (a .env file is loaded by the entry point)
- Provide a typed, immutable config object
- Validate required credentials before anything is started

Non-responsibilities:
- No orchestration logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from adapters.llm.prompts import SYSTEM_PROMPT_V1
from adapters.tts.base import VoiceSelection
from audio.playback import parse_player_command
from constants import (
    AUDIO_PLAYER_COMMAND,
    CHAT_MODEL,
    DEFAULT_KEYWORD_PATH,
    ELEVENLABS_MODEL_ID,
    ELEVENLABS_VOICE_ID,
    MAX_CONTEXT_TURNS,
    POST_WAKE_DELAY_MS,
    RECORD_DURATION_S,
    SERVICE_TIMEOUT_S,
    TRANSCRIPTION_LANGUAGE,
    TRANSCRIPTION_MODEL,
    TTS_LANGUAGE_CODE,
    TTS_VOICE_GENDER,
    TTS_VOICE_NAME,
    WAKE_WORD_SENSITIVITY,
)

_TTS_PROVIDERS = ("google", "elevenlabs")
_LLM_PROVIDERS = ("openai", "groq")


class ConfigError(ValueError):
    """Configuration is missing or invalid. Fatal at startup."""


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed downward to the
    builders in app.py.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    log_level: str
    enable_json_logs: bool

    # ------------------------------------------------------------------
    # Wake word
    # ------------------------------------------------------------------

    porcupine_access_key: str | None
    porcupine_keyword_path: str | None
    porcupine_keyword: str | None
    wake_word_sensitivity: float

    # ------------------------------------------------------------------
    # Transcription + LLM
    # ------------------------------------------------------------------

    openai_api_key: str | None
    transcription_model: str
    transcription_language: str

    llm_provider: str
    llm_model: str
    groq_api_key: str | None
    chat_system_prompt: str | None
    chat_history_turns: int

    # ------------------------------------------------------------------
    # TTS
    # ------------------------------------------------------------------

    tts_provider: str
    google_client_email: str | None
    google_private_key: str | None
    google_project: str | None
    tts_language_code: str
    tts_voice_name: str
    tts_voice_gender: str
    elevenlabs_api_key: str | None
    elevenlabs_voice_id: str
    elevenlabs_model_id: str

    # ------------------------------------------------------------------
    # Cycle timing / devices
    # ------------------------------------------------------------------

    record_duration_s: float
    post_wake_delay_ms: int
    service_timeout_s: float
    audio_player: str

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env(environ: Mapping[str, str] | None = None) -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ConfigError if a numeric value cannot be parsed.
            Missing credentials are reported by validate().
        """
        env = os.environ if environ is None else environ

        keyword = env.get("PORCUPINE_KEYWORD") or None
        keyword_path = env.get("PORCUPINE_KEYWORD_PATH") or (None if keyword else DEFAULT_KEYWORD_PATH)

        # None: built-in voice prompt; "": no system prompt
        system_prompt = env.get("CHAT_SYSTEM_PROMPT")

        return AppConfig(
            log_level=env.get("LOG_LEVEL", "INFO"),
            enable_json_logs=env.get("ENABLE_JSON_LOGS", "1") == "1",

            porcupine_access_key=env.get("PORCUPINE_ACCESS_KEY"),
            porcupine_keyword_path=keyword_path,
            porcupine_keyword=keyword,
            wake_word_sensitivity=_float(env, "WAKE_WORD_SENSITIVITY", WAKE_WORD_SENSITIVITY),

            openai_api_key=env.get("OPENAI_API_KEY"),
            transcription_model=env.get("TRANSCRIPTION_MODEL", TRANSCRIPTION_MODEL),
            transcription_language=env.get("TRANSCRIPTION_LANGUAGE", TRANSCRIPTION_LANGUAGE),

            llm_provider=env.get("LLM_PROVIDER", "openai").lower(),
            llm_model=env.get("LLM_MODEL", CHAT_MODEL),
            groq_api_key=env.get("GROQ_API_KEY"),
            chat_system_prompt=system_prompt,
            chat_history_turns=_int(env, "CHAT_HISTORY_TURNS", MAX_CONTEXT_TURNS),

            tts_provider=env.get("TTS_PROVIDER", "google").lower(),
            google_client_email=env.get("GOOGLE_CLOUD_CLIENT_EMAIL"),
            google_private_key=normalize_private_key(env.get("GOOGLE_CLOUD_PRIVATE_KEY")),
            google_project=env.get("GOOGLE_CLOUD_PROJECT"),
            tts_language_code=env.get("TTS_LANGUAGE_CODE", TTS_LANGUAGE_CODE),
            tts_voice_name=env.get("TTS_VOICE_NAME", TTS_VOICE_NAME),
            tts_voice_gender=env.get("TTS_VOICE_GENDER", TTS_VOICE_GENDER).upper(),
            elevenlabs_api_key=env.get("ELEVENLABS_API_KEY"),
            elevenlabs_voice_id=env.get("ELEVENLABS_VOICE_ID", ELEVENLABS_VOICE_ID),
            elevenlabs_model_id=env.get("ELEVENLABS_MODEL_ID", ELEVENLABS_MODEL_ID),

            record_duration_s=_float(env, "RECORD_DURATION_S", RECORD_DURATION_S),
            post_wake_delay_ms=_int(env, "POST_WAKE_DELAY_MS", POST_WAKE_DELAY_MS),
            service_timeout_s=_float(env, "SERVICE_TIMEOUT_S", SERVICE_TIMEOUT_S),
            audio_player=env.get("AUDIO_PLAYER", AUDIO_PLAYER_COMMAND),
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check that every credential the selected providers need is present.

        Raises:
            ConfigError naming every missing or invalid setting.
        """
        missing: list[str] = []
        invalid: list[str] = []

        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.porcupine_access_key:
            missing.append("PORCUPINE_ACCESS_KEY")

        if self.llm_provider not in _LLM_PROVIDERS:
            invalid.append(f"LLM_PROVIDER={self.llm_provider!r}")
        elif self.llm_provider == "groq" and not self.groq_api_key:
            missing.append("GROQ_API_KEY")

        if self.tts_provider not in _TTS_PROVIDERS:
            invalid.append(f"TTS_PROVIDER={self.tts_provider!r}")
        elif self.tts_provider == "google":
            if not self.google_client_email:
                missing.append("GOOGLE_CLOUD_CLIENT_EMAIL")
            if not self.google_private_key:
                missing.append("GOOGLE_CLOUD_PRIVATE_KEY")
        elif not self.elevenlabs_api_key:
            missing.append("ELEVENLABS_API_KEY")

        if not 0.0 <= self.wake_word_sensitivity <= 1.0:
            invalid.append(f"WAKE_WORD_SENSITIVITY={self.wake_word_sensitivity}")
        if self.record_duration_s <= 0:
            invalid.append(f"RECORD_DURATION_S={self.record_duration_s}")
        if self.service_timeout_s <= 0:
            invalid.append(f"SERVICE_TIMEOUT_S={self.service_timeout_s}")
        if self.chat_history_turns < 0:
            invalid.append(f"CHAT_HISTORY_TURNS={self.chat_history_turns}")
        try:
            parse_player_command(self.audio_player)
        except ValueError:
            invalid.append(f"AUDIO_PLAYER={self.audio_player!r}")

        if missing or invalid:
            parts = []
            if missing:
                parts.append("missing: " + ", ".join(missing))
            if invalid:
                parts.append("invalid: " + ", ".join(invalid))
            raise ConfigError("Configuration error (" + "; ".join(parts) + ")")

    # ------------------------------------------------------------------
    # Derived settings
    # ------------------------------------------------------------------

    def system_prompt(self) -> str | None:
        """Unset -> built-in voice prompt; empty string -> no system prompt."""
        if self.chat_system_prompt is None:
            return SYSTEM_PROMPT_V1
        return self.chat_system_prompt or None

    def voice(self) -> VoiceSelection:
        """Voice selection for the configured TTS provider."""
        name = self.elevenlabs_voice_id if self.tts_provider == "elevenlabs" else self.tts_voice_name
        return VoiceSelection(
            language_code=self.tts_language_code,
            name=name,
            gender=self.tts_voice_gender,
        )


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def normalize_private_key(raw: str | None) -> str | None:
    """
    Undo the usual .env mangling of a PEM key: literal "\\n" sequences
    become newlines and one pair of surrounding quotes is stripped.
    """
    if raw is None:
        return None
    key = raw.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in ("'", '"'):
        key = key[1:-1]
    return key.replace("\\n", "\n") or None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
