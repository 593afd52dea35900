"""
Argue Request Validator

Turns the raw JSON body of ``POST /api/argue`` into a GenerationRequest.

VALIDATION SEQUENCE:
--------------------
1. Body must be a JSON object
2. opponentLine must be a string
3. opponentLine must not be blank after trimming
4. opponentLine must fit OPPONENT_LINE_MAX_LENGTH
5. intensity is normalized, never rejected

Every failure raises InvalidInputError carrying the user-facing message; the
application's exception handler turns it into ``400 {"error": message}``.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from retort.application.api.models import ArgueRequestModel
from retort.core.config.constants import (
    MSG_BODY_NOT_JSON,
    MSG_OPPONENT_LINE_EMPTY,
    MSG_OPPONENT_LINE_NOT_STRING,
    MSG_OPPONENT_LINE_TOO_LONG,
)
from retort.core.config.settings import get_settings
from retort.core.exceptions import InvalidInputError
from retort.core.logging.logger import get_logger
from retort.llm_stream.models import GenerationRequest, normalize_intensity

logger = get_logger(__name__)


class ArgueRequestValidator:
    """
    Validates argue requests.

    Usage:
        validator = ArgueRequestValidator()
        generation = validator.validate(body, request_id="abc", referer=origin)
    """

    def __init__(self, max_length: int | None = None):
        self.max_length = max_length or get_settings().app.OPPONENT_LINE_MAX_LENGTH

    def parse_body(self, body: Any) -> ArgueRequestModel:
        if not isinstance(body, dict):
            raise InvalidInputError(MSG_BODY_NOT_JSON, details={"body_type": type(body).__name__})
        try:
            return ArgueRequestModel.model_validate(body)
        except PydanticValidationError as e:
            raise InvalidInputError.from_exception(e, message=MSG_BODY_NOT_JSON) from e

    def validate_opponent_line(self, value: Any) -> str:
        """
        Check and trim the opponent's line.

        Raises:
            InvalidInputError: If the value is not a string, blank, or too long
        """
        if not isinstance(value, str):
            raise InvalidInputError(
                MSG_OPPONENT_LINE_NOT_STRING,
                details={"field": "opponentLine", "type": type(value).__name__},
            )

        trimmed = value.strip()
        if not trimmed:
            raise InvalidInputError(MSG_OPPONENT_LINE_EMPTY, details={"field": "opponentLine"})

        if len(trimmed) > self.max_length:
            raise InvalidInputError(
                MSG_OPPONENT_LINE_TOO_LONG.format(limit=self.max_length),
                details={"field": "opponentLine", "length": len(trimmed), "limit": self.max_length},
            )
        return trimmed

    def validate(
        self, body: Any, request_id: str | None = None, referer: str | None = None
    ) -> GenerationRequest:
        """
        Validate a decoded JSON body.

        Args:
            body: Decoded JSON body
            request_id: Correlation ID
            referer: Caller origin

        Returns:
            GenerationRequest: trimmed line and normalized intensity

        Raises:
            InvalidInputError: If validation fails
        """
        model = self.parse_body(body)
        opponent_line = self.validate_opponent_line(model.opponent_line)
        intensity = normalize_intensity(model.intensity)

        logger.debug(
            "Request validation passed",
            stage="1.0",
            line_length=len(opponent_line),
            intensity=intensity,
        )

        fields: dict[str, Any] = {"opponent_line": opponent_line, "intensity": intensity, "referer": referer}
        if request_id:
            fields["request_id"] = request_id
        return GenerationRequest(**fields)
