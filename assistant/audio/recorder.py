"""
Fixed-duration utterance recorder.

Records the user's command after the wake word into a WAV file
(PCM16, mono, 16 kHz) at a caller-owned path.

The recorder opens its own input stream for the duration of the
recording; the continuous wake-word stream keeps running and its chunks
are dropped by the listening loop meanwhile.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import sounddevice as sd

from audio.errors import CaptureError
from audio.pcm import write_wav
from constants import (
    AUDIO_CHANNELS,
    AUDIO_DTYPE,
    AUDIO_SAMPLE_RATE_HZ,
    CAPTURE_BLOCK_SAMPLES,
)
from observability.logger import log_event


class UtteranceRecorder:
    """
    Records `duration_s` seconds of microphone audio into a WAV file.

    The wait is an asyncio sleep; the event loop is never blocked.
    """

    def __init__(
        self,
        *,
        sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
        device: int | str | None = None,
    ) -> None:
        self._sample_rate_hz = sample_rate_hz
        self._device = device

    async def record(self, path: Path, *, duration_s: float) -> Path:
        """
        Capture audio into `path`.

        Raises:
            CaptureError if the device fails, reports an input error,
            or delivers no audio.
        """
        chunks: list[bytes] = []
        statuses: list[str] = []

        def _callback(indata: Any, frames: int, time_info: Any, status: Any) -> None:
            # pylint: disable=unused-argument
            if status:
                statuses.append(str(status))
            chunks.append(bytes(indata))

        log_event({"event_type": "RECORDING_STARTED", "duration_s": duration_s})

        try:
            with sd.RawInputStream(
                samplerate=self._sample_rate_hz,
                blocksize=CAPTURE_BLOCK_SAMPLES,
                channels=AUDIO_CHANNELS,
                dtype=AUDIO_DTYPE,
                device=self._device,
                callback=_callback,
            ):
                await asyncio.sleep(duration_s)
        except (sd.PortAudioError, ValueError) as exc:
            raise CaptureError(f"Recording failed: {exc}") from exc

        pcm = b"".join(chunks)
        if not pcm:
            raise CaptureError("Recording produced no audio")

        try:
            write_wav(path, pcm, sample_rate_hz=self._sample_rate_hz)
        except (OSError, RuntimeError, ValueError) as exc:
            raise CaptureError(f"Failed to write recording: {exc}") from exc

        log_event({
            "event_type": "RECORDING_SAVED",
            "path": str(path),
            "bytes": len(pcm),
            "input_status_warnings": statuses[:5],
        })
        return path
