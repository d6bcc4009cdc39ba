"""
Continuous microphone capture.

Responsibilities:
- Open a raw PCM16 mono 16 kHz input stream
- Hand every chunk to the event loop's ChunkChannel, in arrival order

Non-responsibilities:
- No framing (see audio.frame_assembler)
- No wake-word or state logic

The PortAudio callback runs on its own thread, so chunks cross into the
event loop via loop.call_soon_threadsafe; the channel itself is never
touched off-loop.
"""

from __future__ import annotations

import asyncio
from typing import Any

import sounddevice as sd

from audio.errors import CaptureError
from audio.queues import ChunkChannel
from constants import (
    AUDIO_CHANNELS,
    AUDIO_DTYPE,
    AUDIO_SAMPLE_RATE_HZ,
    CAPTURE_BLOCK_SAMPLES,
)
from observability.logger import log_event


class MicrophoneStream:
    """
    Start/stop lifecycle around a sounddevice RawInputStream.

    One instance per process; start() is idempotent.
    """

    def __init__(
        self,
        *,
        channel: ChunkChannel,
        sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
        block_samples: int = CAPTURE_BLOCK_SAMPLES,
        device: int | str | None = None,
    ) -> None:
        self._channel = channel
        self._sample_rate_hz = sample_rate_hz
        self._block_samples = block_samples
        self._device = device
        self._stream: sd.RawInputStream | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._status_warnings = 0

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Open and start the input stream, delivering chunks onto `loop`."""
        if self._stream is not None:
            return

        self._loop = loop
        try:
            stream = sd.RawInputStream(
                samplerate=self._sample_rate_hz,
                blocksize=self._block_samples,
                channels=AUDIO_CHANNELS,
                dtype=AUDIO_DTYPE,
                device=self._device,
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            raise CaptureError(f"Failed to open microphone: {exc}") from exc

        self._stream = stream
        log_event({
            "event_type": "CAPTURE_STARTED",
            "sample_rate_hz": self._sample_rate_hz,
            "block_samples": self._block_samples,
        })

    def stop(self) -> None:
        """Stop and close the input stream. Safe to call repeatedly."""
        stream = self._stream
        self._stream = None
        if stream is None:
            return

        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as exc:
            log_event({
                "level": "WARNING",
                "event_type": "CAPTURE_STOP_FAILED",
                "error": str(exc),
            })
            return

        log_event({
            "event_type": "CAPTURE_STOPPED",
            **self._channel.snapshot(),
        })

    # ------------------------------------------------------------------
    # Internal (PortAudio thread)
    # ------------------------------------------------------------------

    def _callback(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        # pylint: disable=unused-argument
        loop = self._loop
        if loop is None or loop.is_closed():
            return

        if status:
            self._status_warnings += 1
            loop.call_soon_threadsafe(log_event, {
                "level": "WARNING",
                "event_type": "CAPTURE_STATUS",
                "status": str(status),
                "count": self._status_warnings,
            })

        loop.call_soon_threadsafe(self._channel.offer, bytes(indata))
