"""
Event logger.

- Write one event per line to stdout (JSONL by default)
- No buffering, no batching
- Events below the configured level are discarded
- No side effects beyond logging
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


_LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

_min_level: int = _LEVELS["INFO"]
_json_lines: bool = True


def configure(*, level: str = "INFO", json_lines: bool = True) -> None:
    """
    Set the minimum level and the line format.

    Unknown level names fall back to INFO.
    """
    global _min_level, _json_lines  # pylint: disable=global-statement
    _min_level = _LEVELS.get(level.upper(), _LEVELS["INFO"])
    _json_lines = json_lines


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single event line to stdout.

    The caller supplies an event dict with at least `event_type`.
    `level` defaults to INFO and `ts_ms` to the current wall-clock time.

    This function:
    - Serializes to JSON (or key=value when JSON lines are disabled)
    - Writes exactly one line
    - Flushes immediately
    - Never raises
    """
    level = str(event.get("level", "INFO")).upper()
    if _LEVELS.get(level, _LEVELS["INFO"]) < _min_level:
        return

    payload: dict[str, Any] = {"ts_ms": int(time.time() * 1000), "level": level}
    payload.update(event)

    try:
        if _json_lines:
            line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        else:
            line = _format_plain(payload)
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash the assistant
        fallback: dict[str, Any] = {
            "ts_ms": payload.get("ts_ms"),
            "level": "ERROR",
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)


def _format_plain(payload: Mapping[str, Any]) -> str:
    head = f"{payload.get('level')} {payload.get('event_type', '-')}"
    rest = " ".join(
        f"{k}={json.dumps(v, ensure_ascii=False)}"
        for k, v in payload.items()
        if k not in ("level", "event_type", "ts_ms")
    )
    return f"{head} {rest}".rstrip()
