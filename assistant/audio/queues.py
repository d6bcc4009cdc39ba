# assistant/audio/queues.py
"""
Bounded capture channel between the microphone and the listening loop.

Requirements:
- Single producer (capture callback, marshalled onto the event loop)
- Single consumer (listening loop) preserving arrival order
- Explicit drop behavior, reasons distinguishable (overflow vs busy)
- No backlog growth while a conversation cycle is running
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class DropReason(str, Enum):
    """
    Reason an audio chunk was dropped.
    """
    OVERFLOW = "overflow"
    BUSY = "busy"


@dataclass
class DropCounters:
    """
    Drop counters for observability.
    """
    overflow: int = 0
    busy: int = 0


class ChunkChannel:
    """
    Bounded FIFO channel of raw PCM byte chunks.

    Drop rules:
    - offer() on a full channel drops the NEW chunk (overflow)
    - the consumer calls mark_dropped(BUSY) for chunks it discards while
      a conversation cycle is running

    Must only be touched from the event loop thread; use
    loop.call_soon_threadsafe(channel.offer, chunk) from capture threads.
    """

    def __init__(self, *, max_chunks: int) -> None:
        if max_chunks <= 0:
            raise ValueError("max_chunks must be > 0")

        self._queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=max_chunks)
        self.drops: DropCounters = DropCounters()

    # -------------------------
    # Core operations
    # -------------------------

    def offer(self, chunk: bytes) -> bool:
        """
        Enqueue a chunk without waiting.

        Returns:
            True if enqueued
            False if dropped
        """
        try:
            self._queue.put_nowait(chunk)
        except asyncio.QueueFull:
            self.mark_dropped(DropReason.OVERFLOW)
            return False
        return True

    async def get(self) -> bytes:
        """Wait for and return the oldest chunk."""
        return await self._queue.get()

    def mark_dropped(self, reason: DropReason) -> None:
        """Account for a dropped chunk."""
        if reason is DropReason.OVERFLOW:
            self.drops.overflow += 1
        else:
            self.drops.busy += 1

    def clear(self) -> None:
        """
        Drop all queued chunks without counting them as drops.

        Used on shutdown.
        """
        while not self._queue.empty():
            self._queue.get_nowait()

    # -------------------------
    # Introspection helpers
    # -------------------------

    def __len__(self) -> int:
        return self._queue.qsize()

    def total_drops(self) -> int:
        """
        Total chunks dropped for any reason.
        """
        return self.drops.overflow + self.drops.busy

    def snapshot(self) -> dict[str, int]:
        """
        Lightweight snapshot for logging.
        """
        return {
            "chunks": self._queue.qsize(),
            "dropped_overflow": self.drops.overflow,
            "dropped_busy": self.drops.busy,
            "dropped_total": self.total_drops(),
        }
