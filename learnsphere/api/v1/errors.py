from __future__ import annotations

from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from learnsphere.infrastructure.observability.correlation import get_correlation_id


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None
    request_id: str


class ErrorEnvelope(BaseModel):
    error: ErrorBody


# Statuses the session routes answer with, each carrying an ErrorEnvelope.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorEnvelope, "description": "SESSION_NOT_FOUND"},
    409: {"model": ErrorEnvelope, "description": "SESSION_BUSY"},
    422: {
        "model": ErrorEnvelope,
        "description": "CONTENT_VALIDATION_FAILED or FRONTEND_CONTRACT_BREACH",
    },
    500: {"model": ErrorEnvelope, "description": "INTERNAL_ERROR"},
}


def error_envelope(code: str, message: str, details: Any = None) -> dict[str, Any]:
    body = ErrorBody(code=code, message=message, details=details, request_id=get_correlation_id())
    return ErrorEnvelope(error=body).model_dump(mode="json")


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = int(status_code)
        self.code = code
        self.message = message
        self.details = details


async def api_error_exception_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, exc.message, exc.details),
    )
