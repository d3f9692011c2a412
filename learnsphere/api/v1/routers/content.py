from typing import Annotated, Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from learnsphere.api.dependencies import get_text_validator
from learnsphere.domain.policies.text_validator import TextValidator
from learnsphere.domain.preferences import GradeLevel

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/content", tags=["content"])


class ValidateContentRequest(BaseModel):
    text: str
    grade_level: Optional[GradeLevel] = None


@router.post("/validate", response_model=Dict[str, Any])
async def validate_content(
    request: ValidateContentRequest,
    validator: Annotated[TextValidator, Depends(get_text_validator)],
):
    validation = validator.validate(request.text)
    payload: Dict[str, Any] = {
        "validation": validation.model_dump(mode="json"),
        "statistics": validator.statistics(request.text).model_dump(mode="json"),
        "suggestions": validator.suggest_improvements(request.text),
        "grade_suitability": None,
    }
    if request.grade_level is not None:
        payload["grade_suitability"] = validator.check_grade_suitability(
            request.text, request.grade_level
        ).model_dump(mode="json")

    logger.info(
        "content_validated",
        is_valid=validation.is_valid,
        word_count=validation.word_count,
        complexity=validation.complexity,
    )
    return payload
