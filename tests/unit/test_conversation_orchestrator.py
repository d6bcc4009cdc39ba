# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
from pathlib import Path
from typing import Any

import pytest

from adapters.asr.base import TranscriptionAdapter
from adapters.errors import ChatError, SynthesisError, TranscriptionError
from adapters.llm.base import ChatAdapter
from adapters.tts.base import SpeechSynthesisAdapter, VoiceSelection
from audio.errors import CaptureError
from constants import CHAT_ERROR_TEXT, RECORDING_ERROR_TEXT
from orchestrator.conversation import (
    ConversationOrchestrator,
    CycleInProgressError,
    CycleOutcome,
)
from orchestrator.enums.state import ConversationState as S

WAV = b"RIFF-fake-utterance"
SPEECH = b"ID3-fake-mp3"
HANG = object()

HAPPY_PATH = [S.RECORDING, S.TRANSCRIBING, S.AWAITING_REPLY, S.SYNTHESIZING, S.IDLE]


def of_type(captured, event_type):
    return [e for e in captured if e.get("event_type") == event_type]


async def play_script(script: list[Any], default: Any) -> Any:
    """Pop the next scripted outcome: raise it, hang on it, or return it."""
    outcome = script.pop(0) if script else default
    if outcome is HANG:
        await asyncio.sleep(10)
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


# ---------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------

class FakeRecorder:
    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.paths: list[Path] = []

    async def record(self, path: Path, *, duration_s: float) -> Path:
        self.paths.append(path)
        await play_script(self.script, None)
        path.write_bytes(WAV)
        return path


class FakeTranscriber(TranscriptionAdapter):
    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.calls: list[tuple[bytes, str]] = []

    async def transcribe(self, audio: bytes, *, language: str) -> str:
        self.calls.append((audio, language))
        return await play_script(self.script, "what time is it")


class FakeChat(ChatAdapter):
    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.prompts: list[str] = []

    async def reply(self, text: str) -> str:
        self.prompts.append(text)
        return await play_script(self.script, "It is noon.")


class FakeSynthesizer(SpeechSynthesisAdapter):
    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.texts: list[str] = []
        self.voices: list[VoiceSelection] = []

    async def synthesize(self, text: str, *, voice: VoiceSelection) -> bytes:
        self.texts.append(text)
        self.voices.append(voice)
        return await play_script(self.script, SPEECH)


class FakePlayer:
    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.played: list[bytes] = []

    async def play(self, path: Path) -> bool:
        self.played.append(path.read_bytes())
        return self.ok


class Harness:
    def __init__(
        self,
        tmp_path: Path,
        *,
        recorder: FakeRecorder | None = None,
        transcriber: FakeTranscriber | None = None,
        chat: FakeChat | None = None,
        synthesizer: FakeSynthesizer | None = None,
        player: FakePlayer | None = None,
    ) -> None:
        self.tmp_path = tmp_path
        self.recorder = recorder or FakeRecorder()
        self.transcriber = transcriber or FakeTranscriber()
        self.chat = chat or FakeChat()
        self.synthesizer = synthesizer or FakeSynthesizer()
        self.player = player or FakePlayer()
        self.states: list[S] = []
        self.orchestrator = ConversationOrchestrator(
            recorder=self.recorder,
            transcriber=self.transcriber,
            chat=self.chat,
            synthesizer=self.synthesizer,
            player=self.player,
            record_duration_s=0.01,
            post_wake_delay_s=0,
            service_timeout_s=0.05,
            retry_delay_ms=0,
            temp_dir=tmp_path,
            on_state_change=self.states.append,
        )

    def run(self):
        return asyncio.run(self.orchestrator.run_cycle())

    def leftover_files(self) -> list[Path]:
        return list(self.tmp_path.iterdir())


# ---------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------

def test_full_cycle_speaks_reply_and_cleans_up(tmp_path, events):
    h = Harness(tmp_path)

    result = h.run()

    assert result.outcome is CycleOutcome.COMPLETED
    assert result.transcript == "what time is it"
    assert result.reply == "It is noon."
    assert result.spoken is True

    assert h.states == HAPPY_PATH
    assert h.orchestrator.state is S.IDLE
    assert h.transcriber.calls == [(WAV, "en")]
    assert h.chat.prompts == ["what time is it"]
    assert h.synthesizer.texts == ["It is noon."]
    assert h.synthesizer.voices == [VoiceSelection()]
    assert h.player.played == [SPEECH]
    assert h.leftover_files() == []

    finished = of_type(events, "CYCLE_FINISHED")
    assert finished[-1]["outcome"] == "completed"
    transitions = [(e["from"], e["to"]) for e in of_type(events, "STATE_CHANGED")]
    assert transitions[0] == ("IDLE", "RECORDING")
    assert transitions[-1] == ("SYNTHESIZING", "IDLE")


def test_consecutive_cycles_get_new_ids(tmp_path, events):
    h = Harness(tmp_path)

    first = h.run()
    second = h.run()

    assert second.cycle_id == first.cycle_id + 1
    assert h.states == HAPPY_PATH * 2


# ---------------------------------------------------------------------
# Failure exits
# ---------------------------------------------------------------------

def test_transcription_failure_apologizes_without_synthesizing_state(tmp_path, events):
    h = Harness(tmp_path, transcriber=FakeTranscriber(TranscriptionError("bad audio")))

    result = h.run()

    assert result.outcome is CycleOutcome.TRANSCRIPTION_FAILED
    assert h.synthesizer.texts == [RECORDING_ERROR_TEXT]
    assert h.player.played == [SPEECH]
    assert S.SYNTHESIZING not in h.states
    assert h.chat.prompts == []
    assert h.orchestrator.state is S.IDLE
    assert h.leftover_files() == []
    assert len(h.transcriber.calls) == 1
    assert len(of_type(events, "TRANSCRIPTION_FAILED")) == 1


def test_blank_transcript_counts_as_transcription_failure(tmp_path, events):
    h = Harness(tmp_path, transcriber=FakeTranscriber("   "))

    result = h.run()

    assert result.outcome is CycleOutcome.TRANSCRIPTION_FAILED
    assert h.synthesizer.texts == [RECORDING_ERROR_TEXT]
    assert h.chat.prompts == []


def test_chat_failure_speaks_fallback(tmp_path, events):
    h = Harness(tmp_path, chat=FakeChat(ChatError("401 unauthorized")))

    result = h.run()

    assert result.outcome is CycleOutcome.CHAT_FALLBACK
    assert result.reply == CHAT_ERROR_TEXT
    assert h.synthesizer.texts == [CHAT_ERROR_TEXT]
    assert h.states == HAPPY_PATH
    assert h.leftover_files() == []


def test_capture_failure_apologizes_and_skips_services(tmp_path, events):
    h = Harness(tmp_path, recorder=FakeRecorder(CaptureError("no input device")))

    result = h.run()

    assert result.outcome is CycleOutcome.CAPTURE_FAILED
    assert h.transcriber.calls == []
    assert h.synthesizer.texts == [RECORDING_ERROR_TEXT]
    assert h.states == [S.RECORDING, S.IDLE]
    assert h.leftover_files() == []


def test_synthesis_failure_releases_guard(tmp_path, events):
    h = Harness(tmp_path, synthesizer=FakeSynthesizer(SynthesisError("bad credentials")))

    result = h.run()

    assert result.outcome is CycleOutcome.COMPLETED
    assert result.spoken is False
    assert h.player.played == []
    assert h.orchestrator.state is S.IDLE
    assert len(of_type(events, "SYNTHESIS_FAILED")) == 1

    # the next wake word is served normally
    assert h.run().spoken is True


def test_playback_failure_is_not_fatal(tmp_path, events):
    h = Harness(tmp_path, player=FakePlayer(ok=False))

    result = h.run()

    assert result.outcome is CycleOutcome.COMPLETED
    assert result.spoken is False
    assert h.orchestrator.state is S.IDLE
    assert h.leftover_files() == []


def test_unexpected_error_is_contained(tmp_path, events):
    h = Harness(tmp_path, chat=FakeChat(KeyError("surprise")))

    result = h.run()

    assert result.outcome is CycleOutcome.CRASHED
    assert h.orchestrator.state is S.IDLE
    assert h.leftover_files() == []
    assert len(of_type(events, "CYCLE_CRASHED")) == 1


# ---------------------------------------------------------------------
# Timeout / retry
# ---------------------------------------------------------------------

def test_transient_failure_retried_once(tmp_path, events):
    h = Harness(
        tmp_path,
        transcriber=FakeTranscriber(TranscriptionError("503", retryable=True), "hello"),
    )

    result = h.run()

    assert result.outcome is CycleOutcome.COMPLETED
    assert result.transcript == "hello"
    assert len(h.transcriber.calls) == 2
    retries = of_type(events, "RETRY_SCHEDULED")
    assert [(r["service"], r["failure"]) for r in retries] == [("TRANSCRIPTION", "transient")]


def test_timeout_retried_once_then_succeeds(tmp_path, events):
    h = Harness(tmp_path, chat=FakeChat(HANG, "Sure."))

    result = h.run()

    assert result.outcome is CycleOutcome.COMPLETED
    assert result.reply == "Sure."
    assert len(h.chat.prompts) == 2


def test_second_timeout_gives_up(tmp_path, events):
    h = Harness(tmp_path, transcriber=FakeTranscriber(HANG, HANG, "never used"))

    result = h.run()

    assert result.outcome is CycleOutcome.TRANSCRIPTION_FAILED
    assert len(h.transcriber.calls) == 2
    assert h.orchestrator.state is S.IDLE


def test_rejected_failure_not_retried(tmp_path, events):
    h = Harness(tmp_path, chat=FakeChat(ChatError("400 bad request"), "unused"))

    h.run()

    assert len(h.chat.prompts) == 1
    assert of_type(events, "RETRY_SCHEDULED") == []


# ---------------------------------------------------------------------
# Concurrency guard
# ---------------------------------------------------------------------

def test_wake_word_during_cycle_is_dropped(tmp_path, events):
    h = Harness(tmp_path)
    orch = h.orchestrator

    async def scenario():
        assert orch.trigger() is True
        # claimed synchronously, before the cycle task ever runs
        assert orch.state is S.RECORDING
        assert orch.trigger() is False
        with pytest.raises(CycleInProgressError):
            await orch.run_cycle()
        await orch.wait_idle()

    asyncio.run(scenario())

    assert orch.triggers_dropped == 1
    assert len(h.recorder.paths) == 1
    assert h.states == HAPPY_PATH
    assert len(of_type(events, "WAKE_WORD_DROPPED")) == 1


def test_shutdown_mid_recording_cleans_up(tmp_path, events):
    h = Harness(tmp_path, recorder=FakeRecorder(HANG))
    orch = h.orchestrator

    async def scenario():
        orch.trigger()
        await asyncio.sleep(0.01)
        assert orch.state is S.RECORDING
        await orch.shutdown()

    asyncio.run(scenario())

    assert orch.state is S.IDLE
    assert h.transcriber.calls == []
    assert h.leftover_files() == []


def test_shutdown_before_cycle_starts_releases_guard(tmp_path, events):
    h = Harness(tmp_path)
    orch = h.orchestrator

    async def scenario():
        orch.trigger()
        await orch.shutdown()

    asyncio.run(scenario())

    assert orch.state is S.IDLE
    assert h.recorder.paths == []
