"""
Wake word gate.

Feeds assembled frames to the wake-word engine and reports match/no-match.

Rules:
- A match is a keyword index >= 0; -1 is no match.
- While a conversation cycle is running the gate rejects frames without
  calling the engine.
- The gate keeps no detection state; only counters for observability.
- Any error raised by the engine surfaces as WakeWordEngineError.
"""

from __future__ import annotations

from typing import Callable

from adapters.wakeword.base import WakeWordEngine, WakeWordEngineError
from audio.frames import Frame
from observability.logger import log_event


class WakeWordGate:
    """
    Stateless adapter between frames and the engine.

    Args:
        engine: Wake-word engine with one registered keyword.
        is_idle: Returns True while no conversation cycle is running.
    """

    def __init__(
        self,
        *,
        engine: WakeWordEngine,
        is_idle: Callable[[], bool],
    ) -> None:
        self._engine = engine
        self._is_idle = is_idle
        self.frames_processed = 0
        self.frames_rejected = 0
        self.matches = 0

    def detect(self, frame: Frame) -> bool:
        """
        Return True if `frame` completes the wake word.

        Raises:
            WakeWordEngineError if the engine fails on the frame.
        """
        if not self._is_idle():
            self.frames_rejected += 1
            log_event({
                "level": "DEBUG",
                "event_type": "WAKE_WORD_FRAME_REJECTED",
                "sequence_num": frame.sequence_num,
            })
            return False

        try:
            index = self._engine.process(frame.samples.tolist())
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise WakeWordEngineError(f"wake-word engine failed: {exc}") from exc
        self.frames_processed += 1

        if index >= 0:
            self.matches += 1
            log_event({
                "event_type": "WAKE_WORD_DETECTED",
                "keyword_index": index,
                "sequence_num": frame.sequence_num,
            })
            return True

        return False
