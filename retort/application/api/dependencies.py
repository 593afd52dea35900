"""
FastAPI Dependency Injection Module

Reusable dependencies for route handlers. FastAPI resolves a handler's
dependencies in parameter order, so the argue route lists the validated
request before the orchestrator: a malformed body is rejected before the
provider configuration is even looked at.

Example:
    @router.post("/argue")
    async def argue(generation: GenerationRequestDep, orchestrator: OrchestratorDep):
        ...
"""

import uuid
from typing import Annotated

import orjson
from fastapi import Depends, Request

from retort.application.validators import ArgueRequestValidator
from retort.core.config.constants import (
    HEADER_REQUEST_ID,
    MSG_API_KEY_MISSING,
    MSG_BODY_NOT_JSON,
)
from retort.core.config.settings import Settings, get_settings
from retort.core.exceptions import ConfigurationError, InvalidInputError
from retort.core.logging.logger import get_logger
from retort.llm_stream.models import GenerationRequest
from retort.llm_stream.providers import create_openrouter_provider
from retort.llm_stream.services import StreamOrchestrator

logger = get_logger(__name__)


def get_request_id(request: Request) -> str:
    """Request ID assigned by RequestIdMiddleware, else the inbound header, else a new UUID."""
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())


async def get_generation_request(request: Request) -> GenerationRequest:
    """
    Read and validate the argue body.

    Raises:
        InvalidInputError: On a non-JSON body or invalid fields
    """
    raw = await request.body()
    try:
        body = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise InvalidInputError.from_exception(e, message=MSG_BODY_NOT_JSON) from e

    validator = ArgueRequestValidator()
    return validator.validate(
        body,
        request_id=get_request_id(request),
        referer=request.headers.get("origin"),
    )


def get_orchestrator(request: Request) -> StreamOrchestrator:
    """
    Retrieve the StreamOrchestrator from application state.

    The lifespan handler creates it when an API key is configured. If the
    key arrives later (or the lifespan did not run, as with some test
    clients) the orchestrator is built on first use and cached on
    ``app.state``.

    Raises:
        ConfigurationError: If no API key or no candidate model is configured
    """
    settings = get_settings()
    if not settings.OPENROUTER_API_KEY:
        logger.error("OPENROUTER_API_KEY missing", stage="0.2")
        raise ConfigurationError(MSG_API_KEY_MISSING, details={"setting": "OPENROUTER_API_KEY"})
    if not settings.model_candidates:
        raise ConfigurationError(
            "No candidate models configured", details={"setting": "OPENROUTER_MODELS"}
        )

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is not None:
        return orchestrator

    provider = create_openrouter_provider(settings)
    orchestrator = StreamOrchestrator(provider, settings)
    request.app.state.provider = provider
    request.app.state.orchestrator = orchestrator
    return orchestrator


# ============================================================================
# TYPE ALIASES
# ============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings)]
GenerationRequestDep = Annotated[GenerationRequest, Depends(get_generation_request)]
OrchestratorDep = Annotated[StreamOrchestrator, Depends(get_orchestrator)]
