"""
Process-wide assistant handle.

Holds the long-lived pieces built by app.create_assistant and owns their
start/stop ordering. Imports nothing that touches audio devices, so the
process shell can be exercised with fakes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from adapters.wakeword.base import WakeWordEngine
from observability.logger import log_event
from orchestrator.conversation import ConversationOrchestrator
from orchestrator.listener import WakeWordListener

if TYPE_CHECKING:
    from audio.capture import MicrophoneStream


@dataclass
class Assistant:
    """Process-wide wiring of the listening loop and conversation cycle."""

    engine: WakeWordEngine
    microphone: MicrophoneStream
    orchestrator: ConversationOrchestrator
    listener: WakeWordListener

    async def start(self) -> None:
        """
        Start consuming, then open the microphone.

        Raises:
            CaptureError if the input stream cannot be opened.
        """
        self.listener.start()
        self.microphone.start(asyncio.get_running_loop())

    async def stop(self) -> None:
        """
        Tear down in reverse order: capture, listener, in-flight cycle,
        then the engine's native resources.
        """
        self.microphone.stop()
        await self.listener.stop()
        await self.orchestrator.shutdown()
        self.engine.release()
        log_event({"event_type": "ASSISTANT_STOPPED"})
