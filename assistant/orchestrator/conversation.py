"""
Conversation orchestrator.

Responsibilities:
- Own the single ConversationState (the guard against concurrent cycles)
- Run one wake-word -> record -> transcribe -> chat -> speak cycle at a time
- Apply the timeout/retry policy to every external call
- Convert per-cycle failures into spoken apologies
- Own and delete the cycle's temporary audio files

Non-responsibilities:
- No framing or wake-word detection (see listener / wake_gate)
- No vendor SDK calls (see adapters)

Guarantees:
- trigger() claims the guard synchronously, before any await, so two wake
  words can never start two cycles
- Cleanup (temp files, guard release) runs on every exit path, including
  errors and cancellation
- No adapter failure escapes a cycle
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Protocol, TypeVar

from adapters.asr.base import TranscriptionAdapter, read_utterance
from adapters.errors import AdapterError, TranscriptionError
from adapters.llm.base import ChatAdapter
from adapters.tts.base import SpeechSynthesisAdapter, VoiceSelection
from audio.errors import CaptureError
from constants import (
    CHAT_ERROR_TEXT,
    POST_WAKE_DELAY_MS,
    RECORD_DURATION_S,
    RECORDING_ERROR_TEXT,
    SERVICE_TIMEOUT_S,
    TRANSCRIPTION_LANGUAGE,
    TTS_AUDIO_SUFFIX,
)
from observability.logger import log_event
from observability.metrics import timed
from orchestrator.enums.service import Service
from orchestrator.enums.state import ConversationState
from orchestrator.retry import (
    classify_failure,
    get_retry_delay_ms,
    next_attempt,
    reset_attempt,
    should_retry,
)

T = TypeVar("T")


class Recorder(Protocol):
    """Records one utterance into a WAV file. Raises CaptureError."""

    async def record(self, path: Path, *, duration_s: float) -> Path: ...


class Player(Protocol):
    """Plays an encoded audio file. Returns False on failure, never raises."""

    async def play(self, path: Path) -> bool: ...


class CycleInProgressError(RuntimeError):
    """Raised by run_cycle() when another cycle holds the guard."""


class CycleOutcome(str, Enum):
    """How a conversation cycle ended."""

    COMPLETED = "completed"
    CAPTURE_FAILED = "capture_failed"
    TRANSCRIPTION_FAILED = "transcription_failed"
    CHAT_FALLBACK = "chat_fallback"
    CRASHED = "crashed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CycleResult:
    """Summary of one cycle, for logs and tests."""
    cycle_id: int
    outcome: CycleOutcome
    transcript: str | None = None
    reply: str | None = None
    spoken: bool = False


class ConversationOrchestrator:
    """
    Sequential state machine for the process-wide conversation.

    IDLE -> RECORDING -> TRANSCRIBING -> AWAITING_REPLY -> SYNTHESIZING -> IDLE

    Failure exits:
    - capture error: speak RECORDING_ERROR_TEXT, back to IDLE
    - transcription error: speak RECORDING_ERROR_TEXT, back to IDLE
    - chat error: SYNTHESIZING with CHAT_ERROR_TEXT
    - synthesis / playback error: logged, back to IDLE
    """

    def __init__(
        self,
        *,
        recorder: Recorder,
        transcriber: TranscriptionAdapter,
        chat: ChatAdapter,
        synthesizer: SpeechSynthesisAdapter,
        player: Player,
        voice: VoiceSelection | None = None,
        language: str = TRANSCRIPTION_LANGUAGE,
        record_duration_s: float = RECORD_DURATION_S,
        post_wake_delay_s: float = POST_WAKE_DELAY_MS / 1000.0,
        service_timeout_s: float = SERVICE_TIMEOUT_S,
        retry_delay_ms: int | None = None,
        temp_dir: Path | None = None,
        on_state_change: Callable[[ConversationState], None] | None = None,
    ) -> None:
        """
        Args:
            retry_delay_ms:
                Overrides the per-service retry delay from the retry policy.
            temp_dir:
                Where utterance and speech files are created; the system
                temp directory when None.
            on_state_change:
                Called synchronously after every transition.
        """
        self._recorder = recorder
        self._transcriber = transcriber
        self._chat = chat
        self._synthesizer = synthesizer
        self._player = player
        self._voice = voice or VoiceSelection()
        self._language = language
        self._record_duration_s = record_duration_s
        self._post_wake_delay_s = post_wake_delay_s
        self._service_timeout_s = service_timeout_s
        self._retry_delay_ms = retry_delay_ms
        self._temp_dir = temp_dir
        self._on_state_change = on_state_change

        self._state = ConversationState.IDLE
        self._cycle_seq = 0
        self._cycle_task: asyncio.Task[CycleResult] | None = None
        self.triggers_dropped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is ConversationState.IDLE

    def trigger(self) -> bool:
        """
        Start a cycle in the background if none is running.

        Must be called from the event loop thread.

        Returns:
            True if a cycle was started, False if the wake word was dropped.
        """
        if not self.is_idle:
            self.triggers_dropped += 1
            log_event({
                "event_type": "WAKE_WORD_DROPPED",
                "state": self._state.value,
                "dropped_total": self.triggers_dropped,
            })
            return False

        cycle_id = self._claim()
        task = asyncio.create_task(self._cycle(cycle_id), name=f"conversation-cycle-{cycle_id}")
        self._cycle_task = task
        task.add_done_callback(self._on_cycle_done)
        return True

    async def run_cycle(self) -> CycleResult:
        """
        Run one full cycle in the caller's task.

        Raises:
            CycleInProgressError if a cycle is already running.
        """
        if not self.is_idle:
            raise CycleInProgressError(f"Cycle in progress ({self._state.value})")
        return await self._cycle(self._claim())

    async def wait_idle(self) -> None:
        """Wait for the background cycle, if any, to finish."""
        task = self._cycle_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel the in-flight cycle; its cleanup still runs."""
        task = self._cycle_task
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def _claim(self) -> int:
        self._cycle_seq += 1
        self._set_state(ConversationState.RECORDING, self._cycle_seq)
        return self._cycle_seq

    async def _cycle(self, cycle_id: int) -> CycleResult:
        utterance: Path | None = None
        result = CycleResult(cycle_id=cycle_id, outcome=CycleOutcome.CANCELLED)

        log_event({"event_type": "CYCLE_STARTED", "cycle_id": cycle_id})

        try:
            utterance = self._new_temp_path(".wav")
            result = await self._converse(cycle_id, utterance)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "level": "ERROR",
                "event_type": "CYCLE_CRASHED",
                "cycle_id": cycle_id,
                "state": self._state.value,
                "error": f"{type(exc).__name__}: {exc}",
            })
            result = CycleResult(cycle_id=cycle_id, outcome=CycleOutcome.CRASHED)
        finally:
            if utterance is not None:
                self._remove_quietly(utterance, cycle_id)
            self._set_state(ConversationState.IDLE, cycle_id)
            log_event({
                "event_type": "CYCLE_FINISHED",
                "cycle_id": cycle_id,
                "outcome": result.outcome.value,
                "spoken": result.spoken,
            })

        return result

    async def _converse(self, cycle_id: int, utterance: Path) -> CycleResult:
        if self._post_wake_delay_s > 0:
            await asyncio.sleep(self._post_wake_delay_s)

        # ---- RECORDING ----
        try:
            with timed("recording_ms", cycle_id=cycle_id):
                await self._recorder.record(utterance, duration_s=self._record_duration_s)
        except CaptureError as exc:
            self._log_failure("RECORDING_FAILED", cycle_id, exc)
            spoken = await self._speak(RECORDING_ERROR_TEXT, cycle_id)
            return CycleResult(cycle_id=cycle_id, outcome=CycleOutcome.CAPTURE_FAILED, spoken=spoken)

        # ---- TRANSCRIBING ----
        self._set_state(ConversationState.TRANSCRIBING, cycle_id)
        try:
            transcript = await self._call(
                Service.TRANSCRIPTION, cycle_id, lambda: self._transcribe(utterance)
            )
        except (AdapterError, asyncio.TimeoutError) as exc:
            self._log_failure("TRANSCRIPTION_FAILED", cycle_id, exc)
            spoken = await self._speak(RECORDING_ERROR_TEXT, cycle_id)
            return CycleResult(
                cycle_id=cycle_id, outcome=CycleOutcome.TRANSCRIPTION_FAILED, spoken=spoken
            )

        log_event({"event_type": "TRANSCRIBED", "cycle_id": cycle_id, "text": transcript})

        # ---- AWAITING_REPLY ----
        self._set_state(ConversationState.AWAITING_REPLY, cycle_id)
        outcome = CycleOutcome.COMPLETED
        try:
            reply = await self._call(Service.CHAT, cycle_id, lambda: self._chat.reply(transcript))
        except (AdapterError, asyncio.TimeoutError) as exc:
            self._log_failure("CHAT_FAILED", cycle_id, exc)
            reply = CHAT_ERROR_TEXT
            outcome = CycleOutcome.CHAT_FALLBACK
        else:
            log_event({"event_type": "CHAT_REPLIED", "cycle_id": cycle_id, "text": reply})

        # ---- SYNTHESIZING ----
        self._set_state(ConversationState.SYNTHESIZING, cycle_id)
        spoken = await self._speak(reply, cycle_id)

        return CycleResult(
            cycle_id=cycle_id,
            outcome=outcome,
            transcript=transcript,
            reply=reply,
            spoken=spoken,
        )

    async def _transcribe(self, utterance: Path) -> str:
        audio = read_utterance(utterance)
        text = await self._transcriber.transcribe(audio, language=self._language)
        if not text.strip():
            raise TranscriptionError("Transcription returned no text")
        return text.strip()

    async def _speak(self, text: str, cycle_id: int) -> bool:
        """
        Synthesize and play `text`. Returns True if playback succeeded.

        Every failure here is logged and absorbed.
        """
        try:
            audio = await self._call(
                Service.SYNTHESIS,
                cycle_id,
                lambda: self._synthesizer.synthesize(text, voice=self._voice),
            )
        except (AdapterError, asyncio.TimeoutError) as exc:
            self._log_failure("SYNTHESIS_FAILED", cycle_id, exc)
            return False

        speech = self._new_temp_path(TTS_AUDIO_SUFFIX)
        try:
            try:
                speech.write_bytes(audio)
            except OSError as exc:
                self._log_failure("SPEECH_WRITE_FAILED", cycle_id, exc)
                return False

            with timed("playback_ms", cycle_id=cycle_id) as details:
                played = await self._player.play(speech)
                details["ok"] = played
            return played
        finally:
            self._remove_quietly(speech, cycle_id)

    # ------------------------------------------------------------------
    # External calls with timeout + retry
    # ------------------------------------------------------------------

    async def _call(
        self,
        service: Service,
        cycle_id: int,
        make_call: Callable[[], Awaitable[T]],
    ) -> T:
        attempt = reset_attempt()
        while True:
            try:
                with timed(
                    f"{service.value.lower()}_ms",
                    cycle_id=cycle_id,
                    state=self._state.value,
                    details={"attempt": attempt.attempt, "ok": False},
                ) as details:
                    result = await asyncio.wait_for(make_call(), timeout=self._service_timeout_s)
                    details["ok"] = True
                return result
            except (AdapterError, asyncio.TimeoutError) as exc:
                failure = classify_failure(exc)
                if not should_retry(service=service, failure=failure, attempt=attempt):
                    raise

                delay_ms = (
                    self._retry_delay_ms
                    if self._retry_delay_ms is not None
                    else get_retry_delay_ms(service=service)
                )
                log_event({
                    "level": "WARNING",
                    "event_type": "RETRY_SCHEDULED",
                    "cycle_id": cycle_id,
                    "service": service.value,
                    "failure": failure.value,
                    "attempt": attempt.attempt + 1,
                    "delay_ms": delay_ms,
                    "error": _describe(exc),
                })
                await asyncio.sleep(delay_ms / 1000.0)
                attempt = next_attempt(attempt)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_state(self, new_state: ConversationState, cycle_id: int) -> None:
        old = self._state
        self._state = new_state
        log_event({
            "event_type": "STATE_CHANGED",
            "decision": "state_changed",
            "cycle_id": cycle_id,
            "from": old.value,
            "to": new_state.value,
        })
        if self._on_state_change is not None:
            try:
                self._on_state_change(new_state)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                log_event({
                    "level": "ERROR",
                    "event_type": "STATE_OBSERVER_FAILED",
                    "error": _describe(exc),
                })

    def _on_cycle_done(self, task: asyncio.Task[CycleResult]) -> None:
        if self._cycle_task is task:
            self._cycle_task = None
        # A task cancelled before its first step never enters _cycle's finally.
        if task.cancelled() and not self.is_idle:
            self._set_state(ConversationState.IDLE, self._cycle_seq)

    def _new_temp_path(self, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix="assistant-", suffix=suffix, dir=self._temp_dir)
        os.close(fd)
        return Path(name)

    @staticmethod
    def _remove_quietly(path: Path, cycle_id: int) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            log_event({
                "level": "WARNING",
                "event_type": "TEMP_FILE_CLEANUP_FAILED",
                "cycle_id": cycle_id,
                "path": str(path),
                "error": _describe(exc),
            })

    @staticmethod
    def _log_failure(event_type: str, cycle_id: int, exc: BaseException) -> None:
        log_event({
            "level": "ERROR",
            "event_type": event_type,
            "cycle_id": cycle_id,
            "error": _describe(exc),
        })


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "TimeoutError: external call timed out"
    return f"{type(exc).__name__}: {exc}"
