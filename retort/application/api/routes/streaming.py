"""
Argue Streaming Route

``POST /api/argue`` streams newline-delimited JSON frames:

    {"type":"model","model":"deepseek/deepseek-chat-v3.1:free"}
    {"type":"partial","replies":["..."]}
    {"type":"complete","replies":["...","...","..."]}

Validation and configuration failures are answered before streaming starts
with a plain JSON ``{"error": ...}`` body (see the application's exception
handlers). Once the 200 response is committed, failures travel in-band as a
terminal ``error`` frame.
"""

from fastapi import APIRouter, status
from fastapi.responses import StreamingResponse

from retort.application.api.dependencies import GenerationRequestDep, OrchestratorDep
from retort.application.api.models import ArgueRequestModel, ErrorResponse
from retort.core.config.constants import HEADER_REQUEST_ID, NDJSON_MEDIA_TYPE, Stage
from retort.core.logging.logger import get_logger, log_stage

router = APIRouter(tags=["Argue"])
logger = get_logger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post(
    "/argue",
    status_code=status.HTTP_200_OK,
    response_class=StreamingResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ArgueRequestModel.model_json_schema()}},
        }
    },
    responses={
        200: {
            "description": "NDJSON frame stream",
            "content": {NDJSON_MEDIA_TYPE: {}},
        },
        400: {"model": ErrorResponse, "description": "Invalid request body"},
        500: {"model": ErrorResponse, "description": "Server misconfiguration"},
    },
)
async def argue(generation: GenerationRequestDep, orchestrator: OrchestratorDep):
    """
    Generate three comeback replies to the opponent's line.

    The request is validated before the orchestrator is resolved, so a bad
    body never touches provider configuration.
    """
    log_stage(
        logger,
        Stage.REQUEST_VALIDATION,
        "Argue request accepted",
        request_id=generation.request_id,
        line_length=len(generation.opponent_line),
        intensity=generation.intensity,
        referer=generation.referer,
    )

    return StreamingResponse(
        orchestrator.stream_bytes(generation),
        media_type=NDJSON_MEDIA_TYPE,
        headers={**STREAM_HEADERS, HEADER_REQUEST_ID: generation.request_id},
    )
