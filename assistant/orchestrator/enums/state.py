"""
Conversation state enumeration.

Rules:
- This enum defines ONLY the control-plane states.
- No behavior, no helper methods, no side effects.
- Transitions are owned exclusively by ConversationOrchestrator.
"""

from __future__ import annotations

from enum import Enum


class ConversationState(str, Enum):
    """
    States of the single process-wide conversation cycle.

    Anything other than IDLE means a cycle is in flight and wake-word
    audio is being dropped.
    """

    IDLE = "IDLE"
    RECORDING = "RECORDING"
    TRANSCRIBING = "TRANSCRIBING"
    AWAITING_REPLY = "AWAITING_REPLY"
    SYNTHESIZING = "SYNTHESIZING"
