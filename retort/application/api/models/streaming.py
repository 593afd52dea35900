"""
Argue API Models

Pydantic models for the argue endpoint's request and error bodies.

The request model deliberately types both fields as ``Any``: the endpoint
answers malformed fields with its own user-facing messages instead of a
generic 422, so type checks happen in ArgueRequestValidator.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArgueRequestModel(BaseModel):
    """
    Raw body of ``POST /api/argue``.

    Example:
        {"opponentLine": "你这方案根本行不通", "intensity": 7}
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [{"opponentLine": "你这方案根本行不通", "intensity": 7}]
        },
    )

    opponent_line: Any = Field(
        default=None, alias="opponentLine", description="What the opponent said (string)"
    )
    intensity: Any = Field(
        default=None, description="Forcefulness 1-10, number or numeric string (default 6)"
    )


class ErrorResponse(BaseModel):
    """JSON body of every non-streaming error response."""

    error: str = Field(..., description="User-facing error message")


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str
    timestamp: str
    version: str
    models: list[str]
