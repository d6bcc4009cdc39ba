"""
CONSTANTS
---------
Single source of truth for behavioral constants of the assistant.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- Deployment-specific values live in config.py and default to these.
- Other modules MUST import from this file rather than repeating literals.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Audio Format (PCM16 mono @ 16kHz)
# =============================================================================

AUDIO_SAMPLE_RATE_HZ: Final[int] = 16_000
AUDIO_CHANNELS: Final[int] = 1
AUDIO_SAMPLE_WIDTH_BYTES: Final[int] = 2  # PCM16 (signed 16-bit)
AUDIO_DTYPE: Final[str] = "int16"

# Capture callback block size in samples (the wake-word frame length is set
# by the engine, not by this value; the assembler bridges the two).
CAPTURE_BLOCK_SAMPLES: Final[int] = 1_024

# Capture channel bound, in chunks. Overflow drops the newest chunk.
CAPTURE_QUEUE_MAX_CHUNKS: Final[int] = 64

# Emit one drop summary every N dropped chunks.
CAPTURE_DROP_LOG_EVERY: Final[int] = 100

# =============================================================================
# Wake Word
# =============================================================================

WAKE_WORD_SENSITIVITY: Final[float] = 0.5
DEFAULT_KEYWORD_PATH: Final[str] = "./porcupine-model/hi-chat_en_raspberry-pi_v3_0_0.ppn"

# =============================================================================
# Conversation Cycle Timing
# =============================================================================

RECORD_DURATION_S: Final[float] = 5.0
POST_WAKE_DELAY_MS: Final[int] = 1_500

# =============================================================================
# External Services
# =============================================================================

TRANSCRIPTION_MODEL: Final[str] = "whisper-1"
TRANSCRIPTION_LANGUAGE: Final[str] = "en"
TRANSCRIPTION_FILENAME: Final[str] = "audio.wav"
TRANSCRIPTION_CONTENT_TYPE: Final[str] = "audio/wav"

CHAT_MODEL: Final[str] = "gpt-4o"
GROQ_BASE_URL: Final[str] = "https://api.groq.com/openai/v1"

TTS_LANGUAGE_CODE: Final[str] = "en-US"
TTS_VOICE_NAME: Final[str] = "en-US-Standard-D"
TTS_VOICE_GENDER: Final[str] = "NEUTRAL"
TTS_AUDIO_SUFFIX: Final[str] = ".mp3"

ELEVENLABS_VOICE_ID: Final[str] = "21m00Tcm4TlvDq8ikWAM"
ELEVENLABS_MODEL_ID: Final[str] = "eleven_turbo_v2"
ELEVENLABS_OUTPUT_FORMAT: Final[str] = "mp3_44100_128"

AUDIO_PLAYER_COMMAND: Final[str] = "play"

# =============================================================================
# Failure Detection & Retry Policy
# =============================================================================

SERVICE_TIMEOUT_S: Final[float] = 30.0
SERVICE_MAX_RETRIES: Final[int] = 1

TRANSCRIPTION_RETRY_DELAY_MS: Final[int] = 300
CHAT_RETRY_DELAY_MS: Final[int] = 300
SYNTHESIS_RETRY_DELAY_MS: Final[int] = 300

# =============================================================================
# Spoken Fallbacks
# =============================================================================

RECORDING_ERROR_TEXT: Final[str] = (
    "Sorry, there was an error with the recording. Please try again."
)
CHAT_ERROR_TEXT: Final[str] = "Sorry, I couldn't process your request."

# =============================================================================
# Conversation Context
# =============================================================================

MAX_CONTEXT_TURNS: Final[int] = 0  # exchanges kept; 0 = stateless
MAX_CONTEXT_CHARS: Final[int] = 6_000

SYSTEM_PROMPT_VERSION: Final[str] = "v1"
PROMPT_HASH_HEX_LEN: Final[int] = 8


# =============================================================================
# Helper Functions
# =============================================================================

def frame_bytes(frame_length: int) -> int:
    """Number of bytes in one PCM16 wake-word frame of `frame_length` samples."""
    return frame_length * AUDIO_SAMPLE_WIDTH_BYTES
