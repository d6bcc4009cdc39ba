"""
Wake-word listening loop.

The single consumer of the capture channel:
- pulls chunks in arrival order
- drops them (counted) while a conversation cycle is running
- otherwise assembles frames and feeds them to the wake-word gate
- triggers the orchestrator on a match and discards the rest of the
  pre-trigger audio
- stops for good if the wake-word engine fails; the failure is kept on
  `failure` so the process can exit non-zero

Everything here runs on the event loop thread, so the assembler buffer
and the orchestrator guard need no locks.
"""

from __future__ import annotations

import asyncio

from adapters.wakeword.base import WakeWordEngineError
from audio.frame_assembler import FrameAssembler
from audio.queues import ChunkChannel, DropReason
from constants import CAPTURE_DROP_LOG_EVERY
from observability.logger import log_event
from orchestrator.conversation import ConversationOrchestrator
from orchestrator.wake_gate import WakeWordGate


class WakeWordListener:
    """
    Consumer task bridging capture -> assembler -> gate -> orchestrator.
    """

    def __init__(
        self,
        *,
        channel: ChunkChannel,
        assembler: FrameAssembler,
        gate: WakeWordGate,
        orchestrator: ConversationOrchestrator,
    ) -> None:
        self._channel = channel
        self._assembler = assembler
        self._gate = gate
        self._orchestrator = orchestrator
        self._task: asyncio.Task[None] | None = None
        self.failure: WakeWordEngineError | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the consumer task. Idempotent."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self.run(), name="wake-word-listener")

    async def stop(self) -> None:
        """Cancel the consumer task and wait for it."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        self._channel.clear()

    async def wait_closed(self) -> None:
        """Wait for the consumer task to finish without cancelling it."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def run(self) -> None:
        """Consume chunks until cancelled or the engine fails."""
        log_event({
            "event_type": "LISTENING_FOR_WAKE_WORD",
            "frame_length": self._assembler.frame_length,
        })
        while True:
            chunk = await self._channel.get()
            try:
                self.handle_chunk(chunk)
            except WakeWordEngineError as exc:
                self.failure = exc
                log_event({
                    "level": "ERROR",
                    "event_type": "WAKE_WORD_ENGINE_FAILED",
                    "error": str(exc),
                    "frames_processed": self._gate.frames_processed,
                    **self._channel.snapshot(),
                })
                return

    # ------------------------------------------------------------------
    # Per-chunk processing
    # ------------------------------------------------------------------

    def handle_chunk(self, chunk: bytes) -> bool:
        """
        Process one chunk.

        Returns:
            True if this chunk triggered a conversation cycle.

        Raises:
            WakeWordEngineError if the engine fails on any frame.
        """
        if not self._orchestrator.is_idle:
            self._channel.mark_dropped(DropReason.BUSY)
            if self._channel.drops.busy % CAPTURE_DROP_LOG_EVERY == 0:
                log_event({
                    "level": "DEBUG",
                    "event_type": "CAPTURE_CHUNK_DROPPED",
                    "reason": DropReason.BUSY.value,
                    **self._channel.snapshot(),
                })
            return False

        for frame in self._assembler.ingest(chunk):
            if not self._gate.detect(frame):
                continue

            if self._orchestrator.trigger():
                # Audio after the wake word belongs to the recorder, not the gate.
                self._assembler.reset()
                return True

        return False
