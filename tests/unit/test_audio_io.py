# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio

import numpy as np
import pytest
import soundfile as sf

import pvporcupine

from adapters.asr.base import read_utterance
from adapters.errors import TranscriptionError
from adapters.wakeword.base import WakeWordEngine, WakeWordInitError
from adapters.wakeword.porcupine import PorcupineEngine
from audio.frames import Frame
from audio.pcm import pcm16le_to_int16, write_wav
from audio.playback import SystemAudioPlayer, parse_player_command


# ---------------------------------------------------------------------
# WAV files
# ---------------------------------------------------------------------

def test_write_wav_is_pcm16_mono_16k(tmp_path):
    pcm = np.array([0, 1, -1, 32767, -32768], dtype="<i2").tobytes()
    path = write_wav(tmp_path / "u.wav", pcm, sample_rate_hz=16000)

    info = sf.info(str(path))
    data, rate = sf.read(str(path), dtype="int16")

    assert info.channels == 1
    assert info.subtype == "PCM_16"
    assert rate == 16000
    assert data.tolist() == [0, 1, -1, 32767, -32768]


def test_partial_sample_is_rejected(tmp_path):
    with pytest.raises(ValueError, match="partial sample"):
        pcm16le_to_int16(b"\x01\x00\x02")
    with pytest.raises(ValueError):
        write_wav(tmp_path / "odd.wav", b"\x00" * 5)


def test_frame_decodes_little_endian_samples():
    frame = Frame(sequence_num=0, pcm_bytes=b"\x01\x00\xff\xff\x00\x80")

    assert len(frame) == 3
    assert frame.samples.tolist() == [1, -1, -32768]


def test_read_utterance_errors(tmp_path):
    with pytest.raises(TranscriptionError, match="does not exist"):
        read_utterance(tmp_path / "missing.wav")

    empty = tmp_path / "empty.wav"
    empty.write_bytes(b"")
    with pytest.raises(TranscriptionError, match="empty"):
        read_utterance(empty)


# ---------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------

def test_player_success_and_failure(tmp_path, events):
    speech = tmp_path / "s.mp3"
    speech.write_bytes(b"mp3")

    assert asyncio.run(SystemAudioPlayer(command="true").play(speech)) is True
    assert asyncio.run(SystemAudioPlayer(command="false").play(speech)) is False


def test_missing_player_is_logged_not_raised(tmp_path, events):
    player = SystemAudioPlayer(command="definitely-not-a-player-binary --quiet")

    assert asyncio.run(player.play(tmp_path / "s.mp3")) is False
    assert [e["event_type"] for e in events] == ["PLAYBACK_FAILED"]


@pytest.mark.parametrize("command", ["", "   ", "play \"unterminated"])
def test_unusable_player_command_is_rejected(command):
    with pytest.raises(ValueError):
        parse_player_command(command)
    with pytest.raises(ValueError):
        SystemAudioPlayer(command=command)


def test_player_command_keeps_quoted_arguments():
    assert parse_player_command("play -q --type \"mp3 file\"") == ["play", "-q", "--type", "mp3 file"]


# ---------------------------------------------------------------------
# Porcupine
# ---------------------------------------------------------------------

class FakeHandle:
    frame_length = 512
    sample_rate = 16000

    def __init__(self) -> None:
        self.deleted = 0

    def process(self, pcm):
        return 0 if any(pcm) else -1

    def delete(self) -> None:
        self.deleted += 1


def test_porcupine_wrapper(monkeypatch):
    handle = FakeHandle()
    created = {}

    def fake_create(**kwargs):
        created.update(kwargs)
        return handle

    monkeypatch.setattr(pvporcupine, "create", fake_create)

    engine = PorcupineEngine(access_key="ak", keyword="porcupine", sensitivity=0.7)

    assert isinstance(engine, WakeWordEngine)
    assert created == {"access_key": "ak", "keywords": ["porcupine"], "sensitivities": [0.7]}
    assert engine.frame_length == 512
    assert engine.process([0] * 512) == -1
    assert engine.process([1] * 512) == 0

    engine.release()
    engine.release()
    assert handle.deleted == 1


def test_porcupine_requires_exactly_one_keyword_source(tmp_path):
    with pytest.raises(WakeWordInitError):
        PorcupineEngine(access_key="ak")
    with pytest.raises(WakeWordInitError):
        PorcupineEngine(access_key="ak", keyword="a", keyword_path=str(tmp_path / "k.ppn"))


def test_porcupine_missing_keyword_file(tmp_path):
    with pytest.raises(WakeWordInitError, match="not found"):
        PorcupineEngine(access_key="ak", keyword_path=str(tmp_path / "missing.ppn"))


def test_porcupine_errors_become_init_errors(monkeypatch):
    def failing_create(**kwargs):
        raise pvporcupine.PorcupineInvalidArgumentError("bad access key")

    monkeypatch.setattr(pvporcupine, "create", failing_create)

    with pytest.raises(WakeWordInitError, match="bad access key"):
        PorcupineEngine(access_key="bad", keyword="porcupine")


def test_porcupine_argument_value_errors_become_init_errors(monkeypatch):
    def rejecting_create(**kwargs):
        raise ValueError("Unknown keyword 'jarvs'")

    monkeypatch.setattr(pvporcupine, "create", rejecting_create)

    with pytest.raises(WakeWordInitError, match="jarvs"):
        PorcupineEngine(access_key="ak", keyword="jarvs")
