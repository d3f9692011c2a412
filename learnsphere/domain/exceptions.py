"""
Closed error taxonomy for the materials generation pipeline.

Every failure surfaced by a stage is mapped exactly once, by
``classify_failure``, into one of the ``GenerationError`` variants below.
Callers discriminate on ``ErrorKind``, never on message text.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional

import groq
import httpx


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    CAPABILITY_NOT_READY = "capability_not_ready"
    RATE_LIMITED = "rate_limited"
    CONTENT_TOO_LONG = "content_too_long"
    NETWORK = "network"
    ABORTED = "aborted"
    UNKNOWN = "unknown"


class GenerationError(Exception):
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.cause = cause

    def with_step(self, step: str) -> "GenerationError":
        if self.step is None:
            self.step = step
        return self


class ContentValidationError(GenerationError):
    kind = ErrorKind.VALIDATION

    def __init__(self, errors: list[str], warnings: Optional[list[str]] = None):
        message = f"Content validation failed: {', '.join(errors)}"
        super().__init__(message, step="validate")
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class CapabilityUnavailableError(GenerationError):
    kind = ErrorKind.CAPABILITY_UNAVAILABLE


class CapabilityNotReadyError(GenerationError):
    kind = ErrorKind.CAPABILITY_NOT_READY


class RateLimitedError(GenerationError):
    kind = ErrorKind.RATE_LIMITED


class ContentTooLongError(GenerationError):
    kind = ErrorKind.CONTENT_TOO_LONG


class NetworkError(GenerationError):
    kind = ErrorKind.NETWORK


class AbortedError(GenerationError):
    kind = ErrorKind.ABORTED


class UnknownProcessingError(GenerationError):
    kind = ErrorKind.UNKNOWN


_RATE_LIMIT_STATUSES = {429}
_TOO_LONG_STATUSES = {413}
_TOO_LONG_CODES = {"context_length_exceeded", "string_above_max_length"}
_NETWORK_ERRORS = (
    TimeoutError,
    asyncio.TimeoutError,
    ConnectionError,
    httpx.TransportError,
    groq.APIConnectionError,
)


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return int(value)


def _status_of(exc: BaseException) -> Optional[int]:
    # google-genai and google-api-core put the HTTP status in an int `code`.
    for attr in ("status_code", "status", "code"):
        status = _as_status(getattr(exc, attr, None))
        if status is not None:
            return status
    return _as_status(getattr(getattr(exc, "response", None), "status_code", None))


def _code_of(exc: BaseException) -> Optional[str]:
    value = getattr(exc, "code", None)
    return value.strip().lower() if isinstance(value, str) else None


def _exception_chain(exc: BaseException):
    """Yields `exc` and the exceptions it was raised from, outermost first."""
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _kind_of(exc: BaseException) -> Optional[type[GenerationError]]:
    if isinstance(exc, asyncio.CancelledError):
        return AbortedError
    if isinstance(exc, _NETWORK_ERRORS):
        return NetworkError
    status = _status_of(exc)
    if status in _RATE_LIMIT_STATUSES:
        return RateLimitedError
    if status in _TOO_LONG_STATUSES or _code_of(exc) in _TOO_LONG_CODES:
        return ContentTooLongError
    return None


def classify_failure(exc: BaseException, step: Optional[str] = None) -> GenerationError:
    """
    Maps any exception raised while running a stage to a tagged error.

    Provider clients wrap transport and HTTP failures (LangChain re-raises
    SDK errors, SDKs re-raise httpx errors), so the whole cause chain is
    inspected and the outermost recognizable failure wins.
    """
    if isinstance(exc, GenerationError):
        return exc.with_step(step) if step else exc

    detail = str(exc) or exc.__class__.__name__
    prefix = f"Failed to {step}" if step else "Generation failed"
    message = f"{prefix}: {detail}"

    for link in _exception_chain(exc):
        if isinstance(link, GenerationError):
            return link.with_step(step) if step else link
        error_cls = _kind_of(link)
        if error_cls is AbortedError:
            return AbortedError("Generation was cancelled", step=step, cause=exc)
        if error_cls is not None:
            return error_cls(message, step=step, cause=exc)

    return UnknownProcessingError(message, step=step, cause=exc)
