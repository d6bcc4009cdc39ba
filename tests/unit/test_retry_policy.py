# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio

import pytest

from adapters.errors import ChatError, SynthesisError, TranscriptionError
from orchestrator.enums.service import Service
from orchestrator.retry import (
    FailureType,
    classify_failure,
    get_retry_delay_ms,
    next_attempt,
    reset_attempt,
    should_retry,
)


def test_classification():
    assert classify_failure(asyncio.TimeoutError()) is FailureType.TIMEOUT
    assert classify_failure(ChatError("503", retryable=True)) is FailureType.TRANSIENT
    assert classify_failure(ChatError("401")) is FailureType.REJECTED
    assert classify_failure(ValueError("x")) is FailureType.REJECTED


@pytest.mark.parametrize("service", list(Service))
@pytest.mark.parametrize("failure", [FailureType.TIMEOUT, FailureType.TRANSIENT])
def test_retry_exactly_once(service, failure):
    first = reset_attempt()
    assert should_retry(service=service, failure=failure, attempt=first) is True
    assert should_retry(service=service, failure=failure, attempt=next_attempt(first)) is False


@pytest.mark.parametrize("exc", [
    TranscriptionError("empty"),
    SynthesisError("bad credentials"),
])
def test_rejections_never_retry(exc):
    failure = classify_failure(exc)
    assert should_retry(service=Service.SYNTHESIS, failure=failure, attempt=reset_attempt()) is False


def test_every_service_has_a_delay():
    for service in Service:
        assert get_retry_delay_ms(service=service) >= 0
