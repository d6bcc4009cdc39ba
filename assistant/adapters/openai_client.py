"""
OpenAI client construction and error mapping.

One AsyncOpenAI client is built per process and shared by the
transcription and chat adapters. SDK-level retries are disabled so the
orchestrator's retry policy is the only one in effect.
"""

from __future__ import annotations

from typing import TypeVar

import openai
from openai import AsyncOpenAI

from adapters.errors import AdapterError
from constants import GROQ_BASE_URL

E = TypeVar("E", bound=AdapterError)


def build_openai_client(
    *,
    api_key: str,
    timeout_s: float,
    base_url: str | None = None,
) -> AsyncOpenAI:
    """Build an AsyncOpenAI client with bounded timeout and no SDK retries."""
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout_s,
        max_retries=0,
    )


def build_chat_client(
    *,
    provider: str,
    openai_api_key: str,
    groq_api_key: str | None,
    timeout_s: float,
) -> AsyncOpenAI:
    """Build the chat client for the provider selected by configuration."""
    if provider.lower() == "groq":
        return build_openai_client(
            api_key=groq_api_key or "",
            base_url=GROQ_BASE_URL,
            timeout_s=timeout_s,
        )

    return build_openai_client(api_key=openai_api_key, timeout_s=timeout_s)


def map_openai_error(exc: openai.OpenAIError, error_cls: type[E], what: str) -> E:
    """
    Convert an SDK exception into the adapter's error type.

    Connection failures, timeouts, rate limits and 5xx responses are
    retryable; every other API error is final.
    """
    if isinstance(exc, openai.APIConnectionError):
        return error_cls(f"No response received from {what}: {exc}", retryable=True)

    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code
        message = _error_message(exc)
        return error_cls(
            f"{what} failed ({status}): {message}",
            retryable=status == 429 or status >= 500,
        )

    return error_cls(f"{what} failed: {type(exc).__name__}: {exc}")


def _error_message(exc: openai.APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        err = body.get("error", body)
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return exc.message or "Unknown API error"
