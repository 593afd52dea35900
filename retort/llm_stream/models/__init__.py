"""
Stream Models

Request, frame and attempt-outcome types shared by the provider,
orchestrator and HTTP layers.
"""

from .stream_request import (
    TERMINAL_FRAMES,
    AttemptOutcome,
    AttemptResult,
    CompleteFrame,
    ErrorFrame,
    FailureRecord,
    GenerationRequest,
    ModelFrame,
    PartialFrame,
    StreamFrame,
    decode_frame,
    encode_frame,
    normalize_intensity,
)

__all__ = [
    "TERMINAL_FRAMES",
    "AttemptOutcome",
    "AttemptResult",
    "CompleteFrame",
    "ErrorFrame",
    "FailureRecord",
    "GenerationRequest",
    "ModelFrame",
    "PartialFrame",
    "StreamFrame",
    "decode_frame",
    "encode_frame",
    "normalize_intensity",
]
