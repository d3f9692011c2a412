from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse

from learnsphere.api.v1.api_router import v1_router
from learnsphere.api.v1.errors import ApiError, api_error_exception_handler, error_envelope
from learnsphere.core.settings import settings
from learnsphere.infrastructure.container import LearnSphereContainer
from learnsphere.infrastructure.observability.correlation import CorrelationMiddleware
from learnsphere.infrastructure.observability.logger_config import configure_structlog

configure_structlog()
logger = structlog.get_logger(__name__)
logger.info(
    "runtime_mode",
    app_env=settings.APP_ENV,
    environment=settings.ENVIRONMENT,
    llm_provider=settings.LLM_PROVIDER,
    groq_configured=bool(settings.GROQ_API_KEY),
    gemini_configured=bool(settings.GEMINI_API_KEY),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = LearnSphereContainer.get_instance()
    app.state.container = container
    await container.startup()
    try:
        yield
    finally:
        await container.shutdown()
        app.state.container = None


app = FastAPI(
    title="LearnSphere Materials API",
    description="Turns source text and learner preferences into personalized learning materials.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationMiddleware)


@app.exception_handler(ResponseValidationError)
async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    logger.error(
        "backend_contract_breach",
        type="contract_violation",
        direction="outbound_backend",
        endpoint=str(request.url),
        validation_errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "BACKEND_CONTRACT_BREACH",
            "Internal Server Error: Data Contract Breach",
            jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handles requests that do not match the input contract.
    """
    logger.warning(
        "frontend_contract_breach",
        type="contract_violation",
        direction="inbound_backend",
        endpoint=str(request.url),
        validation_errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope(
            "FRONTEND_CONTRACT_BREACH",
            "Request validation failed",
            jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return await api_error_exception_handler(request, exc)


app.include_router(v1_router)


@app.get("/health")
def health_check():
    """
    Service health check.
    """
    return {"status": "ok", "service": "learnsphere", "api_v1": "available"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.API_PORT)
