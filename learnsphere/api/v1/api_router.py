from fastapi import APIRouter

from learnsphere.api.v1.routers.capabilities import router as capabilities_router
from learnsphere.api.v1.routers.content import router as content_router
from learnsphere.api.v1.routers.sessions import router as sessions_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(content_router)
v1_router.include_router(capabilities_router)
v1_router.include_router(sessions_router)
