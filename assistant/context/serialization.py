"""Chat request assembly: system prompt + remembered exchanges + current text."""

from __future__ import annotations

from context.conversation import ConversationContext


def serialize_for_llm(
    *,
    system_prompt: str | None,
    context: ConversationContext,
    user_text: str,
) -> list[dict[str, str]]:
    """
    Build the chat-completion message list.

    The system message is omitted when `system_prompt` is empty; the current
    user text always comes last and is not part of the stored context yet.
    """
    head = [{"role": "system", "content": system_prompt}] if system_prompt else []
    return head + context.serialize() + [{"role": "user", "content": user_text}]
