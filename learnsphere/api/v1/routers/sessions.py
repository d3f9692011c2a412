from typing import Annotated, Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from learnsphere.api.dependencies import get_session_service
from learnsphere.api.v1.errors import ERROR_RESPONSES, ApiError
from learnsphere.application.services.learning_session_service import (
    LearningSessionService,
    SessionBusyError,
    SessionNotFoundError,
)
from learnsphere.domain.exceptions import ContentValidationError
from learnsphere.domain.generation import GenerationResult
from learnsphere.domain.preferences import UserPreferences
from learnsphere.domain.sessions import LearningSession

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/sessions", tags=["sessions"], responses=ERROR_RESPONSES)

SessionService = Annotated[LearningSessionService, Depends(get_session_service)]


class CreateSessionRequest(BaseModel):
    text: str
    preferences: UserPreferences


class RegenerateRequest(BaseModel):
    preferences: Optional[UserPreferences] = None


def _result_payload(result: GenerationResult) -> Dict[str, Any]:
    return result.model_dump(mode="json", exclude={"materials"})


def _session_summary(session: LearningSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "title": session.title,
        "status": session.status.value,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
        "preview": session.preview,
        "grade_level": session.preferences.grade_level.value,
        "interest": session.preferences.interest.value,
    }


def _not_found(session_id: str) -> ApiError:
    return ApiError(
        status_code=404,
        code="SESSION_NOT_FOUND",
        message=f"Session {session_id} not found",
    )


def _translate(exc: Exception) -> ApiError:
    if isinstance(exc, ContentValidationError):
        return ApiError(
            status_code=422,
            code="CONTENT_VALIDATION_FAILED",
            message=exc.message,
            details={"errors": exc.errors, "warnings": exc.warnings},
        )
    if isinstance(exc, SessionBusyError):
        return ApiError(status_code=409, code="SESSION_BUSY", message=str(exc))
    if isinstance(exc, SessionNotFoundError):
        return _not_found(exc.session_id)
    logger.error("session_request_failed", error=str(exc), error_type=type(exc).__name__)
    return ApiError(status_code=500, code="INTERNAL_ERROR", message="Internal server error")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def create_session(
    request: CreateSessionRequest,
    service: SessionService,
    response: Response,
    background: bool = False,
):
    """
    Creates a session and generates its materials.

    By default the call returns once the run has finished. With
    `background=true` it answers 202 with the processing session, so the
    run can be followed with GET and stopped with `/abort`.
    """
    try:
        if background:
            session = await service.start_session(request.text, request.preferences)
        else:
            session, result = await service.create_session(request.text, request.preferences)
    except Exception as exc:
        raise _translate(exc) from exc
    if background:
        response.status_code = status.HTTP_202_ACCEPTED
        return {"session": session.model_dump(mode="json"), "result": None}
    return {"session": session.model_dump(mode="json"), "result": _result_payload(result)}


@router.get("", response_model=Dict[str, Any])
async def list_sessions(service: SessionService):
    sessions = await service.list_sessions()
    return {"sessions": [_session_summary(session) for session in sessions]}


@router.get("/{session_id}", response_model=Dict[str, Any])
async def get_session(session_id: str, service: SessionService):
    session = await service.get(session_id)
    if session is None:
        raise _not_found(session_id)
    return {"session": session.model_dump(mode="json")}


@router.delete("/{session_id}", response_model=Dict[str, Any])
async def delete_session(session_id: str, service: SessionService):
    if not await service.delete(session_id):
        raise _not_found(session_id)
    return {"deleted": True, "session_id": session_id}


@router.post("/{session_id}/regenerate", response_model=Dict[str, Any])
async def regenerate_session(
    session_id: str,
    service: SessionService,
    request: Optional[RegenerateRequest] = None,
):
    preferences = request.preferences if request is not None else None
    try:
        session, result = await service.regenerate(session_id, preferences)
    except Exception as exc:
        raise _translate(exc) from exc
    return {"session": session.model_dump(mode="json"), "result": _result_payload(result)}


@router.post("/{session_id}/abort", response_model=Dict[str, Any])
async def abort_session(session_id: str, service: SessionService):
    aborted = await service.abort(session_id)
    return {"session_id": session_id, "aborted": aborted}
