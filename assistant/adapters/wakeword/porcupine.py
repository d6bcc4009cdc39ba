# pyright: reportMissingTypeStubs=false
"""
Picovoice Porcupine wake-word engine.

Thin wrapper that:
- builds a Porcupine handle with exactly one keyword
- exposes frame_length / sample_rate / process / release
- converts Porcupine construction errors (including the ValueError it
  raises for bad arguments) into WakeWordInitError
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import pvporcupine

from adapters.wakeword.base import WakeWordInitError
from constants import WAKE_WORD_SENSITIVITY


class PorcupineEngine:
    """
    One-keyword Porcupine detector.

    Exactly one of `keyword_path` (custom .ppn model) or `keyword`
    (built-in keyword name) must be given.
    """

    def __init__(
        self,
        *,
        access_key: str,
        keyword_path: str | None = None,
        keyword: str | None = None,
        sensitivity: float = WAKE_WORD_SENSITIVITY,
    ) -> None:
        if (keyword_path is None) == (keyword is None):
            raise WakeWordInitError("Configure exactly one of keyword_path or keyword")
        if not 0.0 <= sensitivity <= 1.0:
            raise WakeWordInitError(f"Sensitivity must be in [0, 1], got {sensitivity}")

        kwargs: dict[str, Any] = {
            "access_key": access_key,
            "sensitivities": [sensitivity],
        }
        if keyword_path is not None:
            if not Path(keyword_path).is_file():
                raise WakeWordInitError(f"Keyword model not found: {keyword_path}")
            kwargs["keyword_paths"] = [keyword_path]
        else:
            kwargs["keywords"] = [keyword]

        try:
            self._handle: Any = pvporcupine.create(**kwargs)
        except (pvporcupine.PorcupineError, ValueError) as exc:
            raise WakeWordInitError(f"Failed to initialize Porcupine: {exc}") from exc

    @property
    def frame_length(self) -> int:
        return int(self._handle.frame_length)

    @property
    def sample_rate(self) -> int:
        return int(self._handle.sample_rate)

    def process(self, pcm: Sequence[int]) -> int:
        return int(self._handle.process(pcm))

    def release(self) -> None:
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        handle.delete()
