"""
Duration metrics.

One measurement = one METRIC_TIMER event through observability.logger;
nothing is aggregated in-process. Durations use the monotonic clock, event
timestamps stay wall-clock (filled in by log_event).
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


_open_timers = 0


def emit_timer(
    name: str,
    value_ms: int,
    *,
    cycle_id: int | None = None,
    state: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a single duration metric."""
    log_event({
        "event_type": "METRIC_TIMER",
        "metric": name,
        "value_ms": value_ms,
        "cycle_id": cycle_id,
        "state": state,
        "details": details or {},
    })


def active_timer_count() -> int:
    """Number of timed() blocks currently open."""
    return _open_timers


@contextmanager
def timed(
    name: str,
    *,
    cycle_id: int | None = None,
    state: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Measure the enclosed block and emit exactly one metric, even if it raises.

    Yields the details dict so the block can attach its outcome:

        with timed("chat_ms", cycle_id=cycle_id) as d:
            reply = await chat.reply(text)
            d["chars"] = len(reply)

    Exceptions are never suppressed.
    """
    global _open_timers  # pylint: disable=global-statement
    payload: dict[str, Any] = dict(details or {})
    start_ns = time.monotonic_ns()
    _open_timers += 1
    try:
        yield payload
    finally:
        _open_timers -= 1
        emit_timer(
            name,
            (time.monotonic_ns() - start_ns) // 1_000_000,
            cycle_id=cycle_id,
            state=state,
            details=payload,
        )
