"""
Process entry point.

Responsibilities:
- Load .env, configuration, and logging settings
- Build and start the assistant
- Translate startup failures into a non-zero exit code
- Shut down cleanly on SIGINT / SIGTERM with exit code 0
- Exit non-zero if the wake-word engine fails while listening
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Callable

from dotenv import load_dotenv

from adapters.wakeword.base import WakeWordInitError
from audio.errors import CaptureError
from config import AppConfig, ConfigError
from observability import logger
from observability.logger import log_event
from orchestrator.assistant import Assistant

AssistantFactory = Callable[[AppConfig], Assistant]


def _startup_failed(reason: str, exc: BaseException) -> int:
    log_event({
        "level": "ERROR",
        "event_type": "STARTUP_FAILED",
        "reason": reason,
        "error": str(exc),
    })
    return 1


async def run(
    config: AppConfig,
    *,
    factory: AssistantFactory | None = None,
    stop: asyncio.Event | None = None,
) -> int:
    """
    Run the listening loop until a shutdown signal arrives or the
    wake-word engine fails.

    Returns the process exit code.
    """
    if factory is None:
        # app pulls in the PortAudio bindings; keep them out of import time.
        from app import create_assistant  # pylint: disable=import-outside-toplevel
        factory = create_assistant

    try:
        assistant = factory(config)
    except WakeWordInitError as exc:
        return _startup_failed("wake_word_init", exc)

    if stop is None:
        stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # No loop signal handlers on Windows; KeyboardInterrupt covers SIGINT.
            pass

    try:
        await assistant.start()
    except CaptureError as exc:
        await assistant.stop()
        return _startup_failed("capture", exc)

    log_event({
        "event_type": "ASSISTANT_STARTED",
        "frame_length": assistant.engine.frame_length,
        "sample_rate": assistant.engine.sample_rate,
        "tts_provider": config.tts_provider,
        "llm_provider": config.llm_provider,
        "llm_model": config.llm_model,
    })

    exit_code = 0
    waiters = {
        asyncio.create_task(stop.wait()),
        asyncio.create_task(assistant.listener.wait_closed()),
    }
    try:
        await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        if assistant.listener.failure is not None:
            exit_code = 1
    finally:
        for waiter in waiters:
            waiter.cancel()
        log_event({"event_type": "SHUTTING_DOWN", "exit_code": exit_code})
        await assistant.stop()

    return exit_code


def main() -> int:
    """Console-script entry point."""
    load_dotenv()

    try:
        config = AppConfig.load_from_env()
        config.validate()
    except ConfigError as exc:
        return _startup_failed("config", exc)

    logger.configure(level=config.log_level, json_lines=config.enable_json_logs)

    try:
        return asyncio.run(run(config))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
