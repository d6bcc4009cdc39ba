"""
Chat adapter contract.

Purpose:
- Define the request/response interface to a chat-completion service.
- Keep retries, timeouts, and fallback wording OUT of the adapter.

Rules:
- This file contains NO logic.
- One user message in, one plain-text reply out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ChatAdapter(ABC):
    """
    Abstract base class for chat adapters.

    The adapter is a *dumb pipe*:
    user text -> vendor -> reply text.

    Orchestrator responsibilities (NOT here):
    - Timeouts
    - Retry policy
    - What to say when the call fails
    """

    @abstractmethod
    async def reply(self, text: str) -> str:
        """
        Return the assistant's reply to `text`.

        Contract:
        - Returns non-empty plain text.
        - Raises ChatError on network failure, non-2xx response, or an
          empty reply. `retryable` is set for transient failures.
        - Must NOT retry internally.
        """
        raise NotImplementedError
