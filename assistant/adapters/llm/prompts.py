"""
System prompt for spoken replies.

Versioned so log lines can be correlated with the prompt in use.
"""

from __future__ import annotations

import hashlib

from constants import PROMPT_HASH_HEX_LEN, SYSTEM_PROMPT_VERSION


SYSTEM_PROMPT_V1: str = """
You are a voice assistant. Your reply will be read aloud by a speech synthesizer.

Voice Rules

- Keep responses to 1-3 sentences unless the user asks for detail.
- Do not use markdown, lists, code blocks, emoji, or URLs.
- Spell out symbols and abbreviations the way a person would say them.
- Output plain conversational speech only.

If the request is unclear or appears cut off, ask a short clarifying question.
""".strip()


def prompt_fingerprint(prompt: str) -> str:
    """Short stable hash of a prompt, for logs."""
    digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()
    return f"{SYSTEM_PROMPT_VERSION}-{digest[:PROMPT_HASH_HEX_LEN]}"
