"""
Assistant factory.

Responsibilities:
- Build the wake-word engine, adapters, orchestrator and listening loop
  from an AppConfig
- Hand them to the Assistant, which owns start/stop ordering

This is the app factory pattern: main.py stays a thin process shell and
tests can build the pieces with fakes instead.
"""

from __future__ import annotations

from pathlib import Path

from adapters.asr.whisper_adapter import WhisperAPITranscriber
from adapters.llm.streaming import StreamingChatAdapter
from adapters.openai_client import build_chat_client, build_openai_client
from adapters.tts.base import SpeechSynthesisAdapter
from adapters.tts.elevenlabs_adapter import ElevenLabsTTSAdapter
from adapters.tts.google_tts import GoogleTTSAdapter
from adapters.wakeword.base import WakeWordEngine
from adapters.wakeword.porcupine import PorcupineEngine
from audio.capture import MicrophoneStream
from audio.frame_assembler import FrameAssembler
from audio.playback import SystemAudioPlayer
from audio.queues import ChunkChannel
from audio.recorder import UtteranceRecorder
from config import AppConfig
from constants import AUDIO_SAMPLE_RATE_HZ, CAPTURE_QUEUE_MAX_CHUNKS
from context.conversation import ConversationContext
from observability.logger import log_event
from orchestrator.assistant import Assistant
from orchestrator.conversation import ConversationOrchestrator
from orchestrator.listener import WakeWordListener
from orchestrator.wake_gate import WakeWordGate


def create_assistant(config: AppConfig, *, temp_dir: Path | None = None) -> Assistant:
    """
    Build every component from `config`.

    Raises:
        WakeWordInitError if the engine cannot be created.
    """
    engine = PorcupineEngine(
        access_key=config.porcupine_access_key or "",
        keyword_path=config.porcupine_keyword_path,
        keyword=config.porcupine_keyword,
        sensitivity=config.wake_word_sensitivity,
    )

    try:
        return _assemble(config, engine, temp_dir)
    except BaseException:
        engine.release()
        raise


def _assemble(config: AppConfig, engine: WakeWordEngine, temp_dir: Path | None) -> Assistant:
    if engine.sample_rate != AUDIO_SAMPLE_RATE_HZ:
        log_event({
            "level": "WARNING",
            "event_type": "SAMPLE_RATE_MISMATCH",
            "engine_sample_rate": engine.sample_rate,
            "capture_sample_rate": AUDIO_SAMPLE_RATE_HZ,
        })

    openai_client = build_openai_client(
        api_key=config.openai_api_key or "",
        timeout_s=config.service_timeout_s,
    )
    chat_client = (
        openai_client
        if config.llm_provider == "openai"
        else build_chat_client(
            provider=config.llm_provider,
            openai_api_key=config.openai_api_key or "",
            groq_api_key=config.groq_api_key,
            timeout_s=config.service_timeout_s,
        )
    )

    orchestrator = ConversationOrchestrator(
        recorder=UtteranceRecorder(sample_rate_hz=engine.sample_rate),
        transcriber=WhisperAPITranscriber(
            client=openai_client,
            model=config.transcription_model,
        ),
        chat=StreamingChatAdapter(
            client=chat_client,
            model=config.llm_model,
            provider=config.llm_provider,
            system_prompt=config.system_prompt(),
            context=ConversationContext(max_turns=config.chat_history_turns),
        ),
        synthesizer=build_synthesizer(config),
        player=SystemAudioPlayer(command=config.audio_player),
        voice=config.voice(),
        language=config.transcription_language,
        record_duration_s=config.record_duration_s,
        post_wake_delay_s=config.post_wake_delay_ms / 1000.0,
        service_timeout_s=config.service_timeout_s,
        temp_dir=temp_dir,
    )

    channel = ChunkChannel(max_chunks=CAPTURE_QUEUE_MAX_CHUNKS)
    listener = WakeWordListener(
        channel=channel,
        assembler=FrameAssembler(frame_length=engine.frame_length),
        gate=WakeWordGate(engine=engine, is_idle=lambda: orchestrator.is_idle),
        orchestrator=orchestrator,
    )

    return Assistant(
        engine=engine,
        microphone=MicrophoneStream(channel=channel, sample_rate_hz=engine.sample_rate),
        orchestrator=orchestrator,
        listener=listener,
    )


def build_synthesizer(config: AppConfig) -> SpeechSynthesisAdapter:
    """Build the TTS adapter with the provider selected by configuration."""
    if config.tts_provider == "elevenlabs":
        return ElevenLabsTTSAdapter(
            api_key=config.elevenlabs_api_key or "",
            model_id=config.elevenlabs_model_id,
        )

    return GoogleTTSAdapter(
        client_email=config.google_client_email or "",
        private_key=config.google_private_key or "",
        project_id=config.google_project,
    )
