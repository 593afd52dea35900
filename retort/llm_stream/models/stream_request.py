"""
Stream Request and Frame Models

Request-scoped data structures of the retort pipeline:

- GenerationRequest: validated input of one generation
- StreamFrame: discriminated union of the newline-delimited JSON protocol
- FailureRecord / AttemptResult: outcome of one candidate model attempt

Frames are serialized with orjson and parsed back through a single pydantic
TypeAdapter keyed on the ``type`` discriminator.
"""

import math
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from retort.core.config.constants import (
    DEFAULT_INTENSITY,
    MAX_INTENSITY,
    MAX_REPLIES,
    MIN_INTENSITY,
)
from retort.core.exceptions import FrameDecodeError

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def normalize_intensity(value: Any) -> int:
    """
    Map any inbound intensity value into [MIN_INTENSITY, MAX_INTENSITY].

    - numbers are clamped then truncated to an integer
    - strings are parsed from their leading integer ("7", " 8 ", "3.9", "9级")
    - booleans, None, NaN, unparseable strings and other types give the default
    """
    if isinstance(value, bool):
        return DEFAULT_INTENSITY

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        if match is None:
            return DEFAULT_INTENSITY
        number = float(int(match.group(1)))
    else:
        return DEFAULT_INTENSITY

    if math.isnan(number):
        return DEFAULT_INTENSITY

    return int(min(max(number, MIN_INTENSITY), MAX_INTENSITY))


class GenerationRequest(BaseModel):
    """
    One validated generation request.

    Attributes:
        opponent_line: The opponent's words, trimmed and non-empty
        intensity: Forcefulness in [1, 10]
        request_id: Correlation ID for logs
        referer: Origin forwarded to the provider as HTTP-Referer
    """

    model_config = ConfigDict(frozen=True)

    opponent_line: str = Field(..., min_length=1, description="Opponent's line, trimmed")
    intensity: int = Field(
        default=DEFAULT_INTENSITY, ge=MIN_INTENSITY, le=MAX_INTENSITY, description="Intensity 1-10"
    )
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Request ID")
    referer: str | None = Field(default=None, description="Caller origin")


# ============================================================================
# STREAM FRAMES
# ============================================================================


class ModelFrame(BaseModel):
    """Announces the candidate model about to be tried."""

    model_config = ConfigDict(frozen=True)

    type: Literal["model"] = "model"
    model: str


class PartialFrame(BaseModel):
    """Replies extracted so far; superseded by later frames."""

    model_config = ConfigDict(frozen=True)

    type: Literal["partial"] = "partial"
    replies: tuple[str, ...] = Field(..., max_length=MAX_REPLIES)


class CompleteFrame(BaseModel):
    """Terminal success frame."""

    model_config = ConfigDict(frozen=True)

    type: Literal["complete"] = "complete"
    replies: tuple[str, ...] = Field(..., max_length=MAX_REPLIES)


class ErrorFrame(BaseModel):
    """Terminal failure frame."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    error: str
    status: int


StreamFrame = Annotated[
    Union[ModelFrame, PartialFrame, CompleteFrame, ErrorFrame],
    Field(discriminator="type"),
]

_FRAME_ADAPTER: TypeAdapter[StreamFrame] = TypeAdapter(StreamFrame)

TERMINAL_FRAMES = (CompleteFrame, ErrorFrame)


def encode_frame(frame: StreamFrame) -> bytes:
    """Serialize a frame as one NDJSON line (UTF-8, newline-terminated)."""
    return orjson.dumps(frame.model_dump(mode="json")) + b"\n"


def decode_frame(line: str | bytes) -> StreamFrame:
    """
    Parse one NDJSON line into its frame variant.

    Raises:
        FrameDecodeError: If the line is not JSON or matches no frame variant
    """
    try:
        return _FRAME_ADAPTER.validate_json(line)
    except PydanticValidationError as e:
        raise FrameDecodeError.from_exception(e, message="Invalid stream frame") from e


# ============================================================================
# ATTEMPT OUTCOMES
# ============================================================================


@dataclass(frozen=True)
class FailureRecord:
    """Failure of one candidate model."""

    model: str
    status: int
    message: str


class AttemptOutcome(str, Enum):
    """
    Result of trying one candidate model.

    SUCCESS: replies extracted, stop
    RETRY: transient failure, try the next candidate
    FATAL: non-retryable failure, stop with an error frame
    """

    SUCCESS = "success"
    RETRY = "retry"
    FATAL = "fatal"


@dataclass(frozen=True)
class AttemptResult:
    outcome: AttemptOutcome
    replies: tuple[str, ...] = field(default_factory=tuple)
    failure: FailureRecord | None = None
