"""
Wake-word frame assembly.

Purpose:
- Turn arbitrarily sized microphone chunks into the fixed-size PCM16 frames
  the wake-word engine consumes.

Invariants:
- PCM16 signed, little-endian, mono
- Every emitted frame is exactly frame_length samples
- Sub-frame remainders carry over to the next chunk; nothing is padded,
  dropped, or duplicated (frames + leftover == all input bytes)

Design:
- Synchronous and IO-free; owned by the single listening consumer task,
  so no locking.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from audio.frames import Frame
from constants import frame_bytes


class FrameAssembler:
    """
    Accumulates raw byte chunks and slices them into fixed-size frames.

    Usage:
        assembler = FrameAssembler(frame_length=engine.frame_length)
        for frame in assembler.ingest(chunk):
            ...
    """

    def __init__(self, *, frame_length: int) -> None:
        if frame_length <= 0:
            raise ValueError("frame_length must be > 0")

        self._frame_length = frame_length
        self._bytes_per_frame = frame_bytes(frame_length)
        self._buffer = bytearray()
        self._next_seq = 0

    # -------------------------
    # Core operations
    # -------------------------

    def ingest(self, chunk: bytes) -> list[Frame]:
        """
        Append a chunk and return every complete frame now available.

        Empty input yields no frames. Leftover bytes persist for the next call.
        """
        if not chunk:
            return []

        self._buffer.extend(chunk)

        whole_frames = len(self._buffer) // self._bytes_per_frame
        if whole_frames == 0:
            return []

        out: list[Frame] = []
        end = whole_frames * self._bytes_per_frame
        for offset in range(0, end, self._bytes_per_frame):
            out.append(
                Frame(
                    sequence_num=self._next_seq,
                    pcm_bytes=bytes(self._buffer[offset : offset + self._bytes_per_frame]),
                )
            )
            self._next_seq += 1

        del self._buffer[:end]
        return out

    def iter_frames(self, chunks: Iterable[bytes]) -> Iterator[Frame]:
        """
        Lazily assemble frames from a (possibly unbounded) chunk stream.
        """
        for chunk in chunks:
            yield from self.ingest(chunk)

    def reset(self) -> None:
        """
        Discard buffered sub-frame bytes.

        Used when a conversation cycle starts so pre-trigger audio never
        reaches the wake-word engine afterwards.
        """
        self._buffer.clear()

    # -------------------------
    # Introspection helpers
    # -------------------------

    @property
    def frame_length(self) -> int:
        """Samples per emitted frame."""
        return self._frame_length

    @property
    def leftover(self) -> bytes:
        """Bytes waiting for the next chunk (always shorter than one frame)."""
        return bytes(self._buffer)

    def frames_emitted(self) -> int:
        return self._next_seq
