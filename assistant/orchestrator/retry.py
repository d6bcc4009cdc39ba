"""
Retry policy helpers.

Purpose:
- Centralize the timeout/retry rules for external calls
- Keep the orchestrator's cycle readable
- Allow deterministic retry decisions in tests

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

from adapters.errors import AdapterError
from orchestrator.enums.service import Service

from constants import (
    CHAT_RETRY_DELAY_MS,
    SERVICE_MAX_RETRIES,
    SYNTHESIS_RETRY_DELAY_MS,
    TRANSCRIPTION_RETRY_DELAY_MS,
)


# =============================================================================
# Failure Types
# =============================================================================

class FailureType(str, Enum):
    """
    Failure classification used by retry policy.

    TIMEOUT:
        The call did not complete within the service timeout.
        Eligible for retry.

    TRANSIENT:
        The adapter reported a retryable failure (connection error,
        rate limit, 5xx).
        Eligible for retry.

    REJECTED:
        The request or its response was unusable (bad credentials,
        malformed response, empty input or output).
        Never retried: repeating it would fail the same way.

    Cancellation is NOT a failure type and must never trigger retries.
    """

    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    REJECTED = "rejected"


def classify_failure(exc: BaseException) -> FailureType:
    """Map an exception raised by an external call to a FailureType."""
    if isinstance(exc, asyncio.TimeoutError):
        return FailureType.TIMEOUT
    if isinstance(exc, AdapterError) and exc.retryable:
        return FailureType.TRANSIENT
    return FailureType.REJECTED


# =============================================================================
# Retry State
# =============================================================================

@dataclass(frozen=True)
class RetryAttempt:
    """
    Immutable retry attempt counter.

    - attempt == 0 represents the initial attempt (no retry yet).
    - attempt >= 1 represents the Nth retry attempt.
    """
    attempt: int


def next_attempt(current: RetryAttempt) -> RetryAttempt:
    """Return a new RetryAttempt with attempt incremented by 1."""
    return RetryAttempt(attempt=current.attempt + 1)


def reset_attempt() -> RetryAttempt:
    """Returns a fresh retry attempt counter."""
    return RetryAttempt(attempt=0)


# =============================================================================
# Policy
# =============================================================================

def max_attempts(service: Service, failure: FailureType) -> int:
    """
    Maximum retry attempts (excluding the initial attempt).

    - Timeouts and transient failures: retry once, for every service
    - Rejections: never
    """
    # pylint: disable=unused-argument
    if failure in (FailureType.TIMEOUT, FailureType.TRANSIENT):
        return SERVICE_MAX_RETRIES
    return 0


def should_retry(
    *,
    service: Service,
    failure: FailureType,
    attempt: RetryAttempt,
) -> bool:
    """
    Returns True if a retry is allowed.

    attempt = number of retries already performed
    """
    return attempt.attempt < max_attempts(service, failure)


# =============================================================================
# Delay Calculation
# =============================================================================

_RETRY_DELAYS_MS: dict[Service, int] = {
    Service.TRANSCRIPTION: TRANSCRIPTION_RETRY_DELAY_MS,
    Service.CHAT: CHAT_RETRY_DELAY_MS,
    Service.SYNTHESIS: SYNTHESIS_RETRY_DELAY_MS,
}


def get_retry_delay_ms(*, service: Service) -> int:
    """Returns the fixed delay before retrying `service`."""
    return _RETRY_DELAYS_MS.get(service, 0)
