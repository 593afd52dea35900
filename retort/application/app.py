"""
FastAPI Application Entry Point

This is the main entry point for the retort streaming service.
It configures the FastAPI application, middleware, exception handlers and
routes.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from retort.application.api.middleware import ErrorHandlingMiddleware, RequestIdMiddleware
from retort.application.api.routes.health import router as health_router
from retort.application.api.routes.streaming import router as streaming_router
from retort.core.config.constants import HEADER_REQUEST_ID
from retort.core.config.settings import get_settings
from retort.core.exceptions import ConfigurationError, RetortBaseError, ValidationError
from retort.core.logging.logger import get_logger, setup_logging
from retort.llm_stream.providers import create_openrouter_provider
from retort.llm_stream.services import StreamOrchestrator

logger = get_logger(__name__)


# ============================================================================
# LIFESPAN
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    The provider's connection pool is opened once here and closed on
    shutdown. Without an API key the service still starts; argue requests
    then answer 500 until the key is configured.
    """
    settings = get_settings()

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting retort streaming service",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
        models=list(settings.model_candidates),
    )

    if settings.OPENROUTER_API_KEY:
        provider = create_openrouter_provider(settings)
        app.state.provider = provider
        app.state.orchestrator = StreamOrchestrator(provider, settings)
        logger.info("Stream Orchestrator ready")
    else:
        logger.warning("OPENROUTER_API_KEY not set, argue requests will fail until configured")

    try:
        yield
    finally:
        logger.info("Shutting down application")

        provider = getattr(app.state, "provider", None)
        if provider is not None:
            await provider.aclose()

        logger.info("Application shutdown complete")


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


def _error_response(exc: RetortBaseError, status_code: int) -> JSONResponse:
    headers = {HEADER_REQUEST_ID: exc.request_id} if exc.request_id else None
    return JSONResponse(status_code=status_code, content={"error": exc.message}, headers=headers)


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Invalid input: 400, never retried."""
    logger.info("Request rejected", stage="1.0", error_type=type(exc).__name__, error=exc.message)
    return _error_response(exc, 400)


async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error", stage="0.2", error=exc.message, details=exc.details)
    return _error_response(exc, 500)


async def retort_exception_handler(request: Request, exc: RetortBaseError):
    """Any other domain error raised before streaming starts."""
    logger.error(
        f"Service exception: {exc.message}", error_type=type(exc).__name__, details=exc.details
    )
    return _error_response(exc, 500)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Streams three comeback replies to an opponent's line as NDJSON",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        ErrorHandlingMiddleware,
        include_traceback=(settings.app.ENVIRONMENT == "development"),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_REQUEST_ID],
    )

    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(ConfigurationError, configuration_exception_handler)
    app.add_exception_handler(RetortBaseError, retort_exception_handler)

    base_path = settings.app.API_BASE_PATH
    app.include_router(health_router, prefix=base_path)
    app.include_router(streaming_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        current = get_settings()
        return {
            "name": current.app.APP_NAME,
            "version": current.app.APP_VERSION,
            "environment": current.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{current.app.API_BASE_PATH}/health",
            "argue": f"{current.app.API_BASE_PATH}/argue",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "retort.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
