"""Chat adapter over the OpenAI-compatible streaming completions API."""
from __future__ import annotations

import time
from typing import Any

import openai

from adapters.errors import ChatError
from adapters.llm.base import ChatAdapter
from adapters.llm.prompts import prompt_fingerprint
from adapters.openai_client import map_openai_error
from context.conversation import ConversationContext
from context.serialization import serialize_for_llm
from observability.logger import log_event


class StreamingChatAdapter(ChatAdapter):
    """
    Concrete chat adapter.

    Design notes:
    - Streams the completion and joins deltas into one reply string.
    - One adapter instance serves every cycle, sequentially.
    - Optionally carries bounded conversation memory across cycles.
    - Adapter does NOT:
        - Retry
        - Apply timeouts (the client and orchestrator do)
        - Decide fallback wording
    """

    def __init__(
        self,
        *,
        client: Any,
        model: str,
        provider: str = "openai",
        system_prompt: str | None = None,
        context: ConversationContext | None = None,
    ) -> None:
        """
        Args:
            client:
                Vendor client (openai.AsyncOpenAI or compatible).
            model:
                Model identifier string.
            provider:
                "openai" or "groq"; used for logging only.
            system_prompt:
                Prepended to every request when non-empty.
            context:
                Conversation memory; a disabled context keeps requests
                stateless.
        """
        self._client = client
        self._model = model
        self._provider = provider
        self._system_prompt = system_prompt or None
        self._context = context or ConversationContext(max_turns=0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def reply(self, text: str) -> str:
        """Call the completions API and return the full reply text."""
        messages = serialize_for_llm(
            system_prompt=self._system_prompt,
            context=self._context,
            user_text=text,
        )

        log_event({
            "level": "DEBUG",
            "event_type": "CHAT_REQUEST",
            "provider": self._provider,
            "model": self._model,
            "messages": len(messages),
            "system_prompt": (
                prompt_fingerprint(self._system_prompt) if self._system_prompt else None
            ),
        })

        parts: list[str] = []
        t0 = time.monotonic_ns()
        first_token_ms: int | None = None

        try:
            stream = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                stream=True,
            )
            async for chunk in stream:
                delta = self._extract_delta(chunk)
                if not delta:
                    continue
                if first_token_ms is None:
                    first_token_ms = (time.monotonic_ns() - t0) // 1_000_000
                parts.append(delta)
        except openai.OpenAIError as exc:
            raise map_openai_error(exc, ChatError, "Chat completion") from exc

        reply = "".join(parts).strip()
        if not reply:
            raise ChatError("Chat completion returned an empty reply")

        log_event({
            "level": "DEBUG",
            "event_type": "CHAT_REPLY",
            "chars": len(reply),
            "first_token_ms": first_token_ms,
        })

        self._context.commit_exchange(text, reply)
        return reply

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_delta(chunk: Any) -> str:
        """
        Extract token delta from vendor response (OpenAI format).
        """
        try:
            delta = chunk.choices[0].delta
            return delta.content or ""
        except (AttributeError, IndexError):
            return ""
