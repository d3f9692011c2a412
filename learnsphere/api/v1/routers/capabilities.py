from typing import Annotated, Any, Dict

import structlog
from fastapi import APIRouter, Depends

from learnsphere.api.dependencies import get_capability_registry
from learnsphere.api.v1.errors import ApiError
from learnsphere.domain.interfaces.capability_registry import CapabilityKind, CapabilityRegistry

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/capabilities", tags=["capabilities"])


@router.get("", response_model=Dict[str, Any])
async def list_capabilities(
    registry: Annotated[CapabilityRegistry, Depends(get_capability_registry)],
):
    try:
        availability = {kind.value: (await registry.availability(kind)).value for kind in CapabilityKind}
    except Exception as exc:
        logger.error("capability_availability_failed", error=str(exc))
        raise ApiError(
            status_code=500,
            code="CAPABILITY_CHECK_FAILED",
            message="Capability availability check failed",
        )
    return {
        "capabilities": availability,
        "all_ready": all(value == "ready" for value in availability.values()),
    }
