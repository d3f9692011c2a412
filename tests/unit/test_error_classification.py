from __future__ import annotations

import asyncio

import groq
import httpx
import pytest
from langchain_google_genai.chat_models import ChatGoogleGenerativeAIError

from learnsphere.domain.exceptions import (
    AbortedError,
    ContentValidationError,
    ErrorKind,
    RateLimitedError,
    classify_failure,
)


class _StatusError(Exception):
    def __init__(self, status: int):
        super().__init__(f"http {status}")
        self.status = status


class _Response:
    def __init__(self, status_code: int):
        self.status_code = status_code


class _ResponseError(Exception):
    def __init__(self, status_code: int):
        super().__init__("provider error")
        self.response = _Response(status_code)


class _CodedError(Exception):
    def __init__(self, code: str):
        super().__init__("provider rejected input")
        self.code = code


@pytest.mark.parametrize(
    "exc,kind",
    [
        (asyncio.CancelledError(), ErrorKind.ABORTED),
        (TimeoutError("slow"), ErrorKind.NETWORK),
        (ConnectionResetError("reset"), ErrorKind.NETWORK),
        (httpx.ConnectError("refused"), ErrorKind.NETWORK),
        (_StatusError(429), ErrorKind.RATE_LIMITED),
        (_ResponseError(429), ErrorKind.RATE_LIMITED),
        (_StatusError(413), ErrorKind.CONTENT_TOO_LONG),
        (_CodedError("string_above_max_length"), ErrorKind.CONTENT_TOO_LONG),
        (_StatusError(500), ErrorKind.UNKNOWN),
        (ValueError("rate limit mentioned in text only"), ErrorKind.UNKNOWN),
    ],
)
def test_classify_failure_uses_types_and_attributes(exc: BaseException, kind: ErrorKind) -> None:
    error = classify_failure(exc, "summarize")

    assert error.kind == kind
    assert error.step == "summarize"
    assert error.cause is exc


_GROQ_REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


def _raised_from(exc: BaseException, cause: BaseException) -> BaseException:
    try:
        raise exc from cause
    except BaseException as raised:
        return raised


@pytest.mark.parametrize(
    "exc,kind",
    [
        (groq.APIConnectionError(request=_GROQ_REQUEST), ErrorKind.NETWORK),
        (groq.APITimeoutError(request=_GROQ_REQUEST), ErrorKind.NETWORK),
        (
            groq.RateLimitError(
                "Rate limit reached",
                response=httpx.Response(429, request=_GROQ_REQUEST),
                body=None,
            ),
            ErrorKind.RATE_LIMITED,
        ),
        (
            groq.BadRequestError(
                "context too long",
                response=httpx.Response(413, request=_GROQ_REQUEST),
                body=None,
            ),
            ErrorKind.CONTENT_TOO_LONG,
        ),
    ],
)
def test_groq_sdk_errors_are_classified(exc: BaseException, kind: ErrorKind) -> None:
    assert classify_failure(exc, "adapt").kind == kind


def test_groq_connection_error_raised_from_httpx_is_network() -> None:
    exc = _raised_from(
        groq.APIConnectionError(request=_GROQ_REQUEST),
        httpx.ConnectError("connection refused", request=_GROQ_REQUEST),
    )

    assert classify_failure(exc, "summarize").kind == ErrorKind.NETWORK


def test_gemini_resource_exhausted_is_rate_limited() -> None:
    genai_errors = pytest.importorskip("google.genai.errors")
    body = {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
    exc = genai_errors.ClientError(429, body)

    error = classify_failure(exc, "quiz")

    assert error.kind == ErrorKind.RATE_LIMITED
    assert error.cause is exc


def test_wrapped_provider_error_is_classified_by_its_cause() -> None:
    genai_errors = pytest.importorskip("google.genai.errors")
    body = {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
    wrapped = _raised_from(
        ChatGoogleGenerativeAIError("Error calling model 'gemini-2.5-flash-lite'"),
        genai_errors.ClientError(429, body),
    )

    error = classify_failure(wrapped, "concept_map")

    assert error.kind == ErrorKind.RATE_LIMITED
    assert error.message.startswith("Failed to concept_map: Error calling model")


def test_int_code_attribute_is_read_as_status() -> None:
    class _CodeStatusError(Exception):
        code = 429

    assert classify_failure(_CodeStatusError("quota"), "adapt").kind == ErrorKind.RATE_LIMITED


def test_classified_message_names_the_step() -> None:
    error = classify_failure(RuntimeError("model exploded"), "quiz")

    assert error.message == "Failed to quiz: model exploded"


def test_generation_errors_pass_through_and_keep_their_step() -> None:
    original = RateLimitedError("limited", step="adapt")

    assert classify_failure(original, "quiz") is original
    assert original.step == "adapt"

    stepless = AbortedError("stop")
    assert classify_failure(stepless, "quiz").step == "quiz"


def test_content_validation_error_carries_errors_and_warnings() -> None:
    error = ContentValidationError(["too short"], ["very short"])

    assert error.kind == ErrorKind.VALIDATION
    assert error.step == "validate"
    assert error.errors == ["too short"]
    assert error.warnings == ["very short"]
    assert "too short" in error.message
