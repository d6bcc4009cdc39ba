"""
Service enumeration for external request/response calls.

Rules:
- This enum identifies external services only.
- It must NOT encode behavior; retry.py maps services to policy.
"""

from __future__ import annotations

from enum import Enum


class Service(str, Enum):
    """
    External services called once per conversation cycle.
    """

    TRANSCRIPTION = "TRANSCRIPTION"
    CHAT = "CHAT"
    SYNTHESIS = "SYNTHESIS"
