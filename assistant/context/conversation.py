"""
Conversation memory across wake-word cycles.

Each cycle that gets a real reply contributes one Exchange (the user's
transcript and the assistant's reply). Memory is bounded two ways:
- at most max_turns exchanges
- at most max_chars characters across all kept exchanges

Whole exchanges are evicted oldest-first, so the history handed to the chat
model never starts with an orphaned assistant message. The newest exchange
is always kept, even if it alone exceeds max_chars.

max_turns == 0 disables memory: every request carries only the current
user message.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque

from constants import MAX_CONTEXT_CHARS, MAX_CONTEXT_TURNS
from observability.logger import log_event


@dataclass(frozen=True)
class Exchange:
    """One completed user -> assistant round."""
    exchange_id: int
    user_text: str
    assistant_text: str

    @property
    def char_count(self) -> int:
        return len(self.user_text) + len(self.assistant_text)


class ConversationContext:
    """Bounded, chronologically ordered exchange history."""

    def __init__(
        self,
        *,
        max_turns: int = MAX_CONTEXT_TURNS,
        max_chars: int = MAX_CONTEXT_CHARS,
    ) -> None:
        if max_turns < 0:
            raise ValueError("max_turns must be >= 0")
        self._max_turns = max_turns
        self._max_chars = max_chars
        self._exchanges: Deque[Exchange] = deque()
        self._chars = 0
        self._next_id = 1

    @property
    def enabled(self) -> bool:
        return self._max_turns > 0

    def __len__(self) -> int:
        return len(self._exchanges)

    def commit_exchange(self, user_text: str, assistant_text: str) -> None:
        """Remember a completed exchange, evicting old ones as needed."""
        if not self.enabled:
            return

        exchange = Exchange(self._next_id, user_text, assistant_text)
        self._next_id += 1
        self._exchanges.append(exchange)
        self._chars += exchange.char_count

        while len(self._exchanges) > 1 and (
            len(self._exchanges) > self._max_turns or self._chars > self._max_chars
        ):
            evicted = self._exchanges.popleft()
            self._chars -= evicted.char_count
            log_event({
                "level": "DEBUG",
                "event_type": "context_exchange_dropped",
                "exchange_id": evicted.exchange_id,
                "char_count": evicted.char_count,
            })

        if self._chars > self._max_chars:
            log_event({
                "level": "WARNING",
                "event_type": "context_single_exchange_oversized",
                "exchange_id": exchange.exchange_id,
                "char_count": self._chars,
            })

    def serialize(self) -> list[dict[str, str]]:
        """
        Flatten history into chat messages, oldest first:

        [{"role": "user", ...}, {"role": "assistant", ...}, ...]
        """
        messages: list[dict[str, str]] = []
        for ex in self._exchanges:
            messages.append({"role": "user", "content": ex.user_text})
            messages.append({"role": "assistant", "content": ex.assistant_text})
        return messages
