"""
Unit Tests for ArgueRequestValidator

Tests body shape checks, opponent line rules and intensity normalization.
"""

import pytest

from retort.application.validators import ArgueRequestValidator
from retort.core.config.constants import (
    MSG_BODY_NOT_JSON,
    MSG_OPPONENT_LINE_EMPTY,
    MSG_OPPONENT_LINE_NOT_STRING,
    MSG_OPPONENT_LINE_TOO_LONG,
)
from retort.core.exceptions import InvalidInputError
from retort.llm_stream.models import GenerationRequest


@pytest.mark.unit
class TestArgueRequestValidator:
    """Test suite for ArgueRequestValidator."""

    @pytest.fixture
    def validator(self):
        return ArgueRequestValidator()

    def test_valid_body(self, validator, sample_body):
        generation = validator.validate(sample_body, request_id="req-1", referer="https://a.example")

        assert isinstance(generation, GenerationRequest)
        assert generation.opponent_line == "你这方案根本行不通"
        assert generation.intensity == 6
        assert generation.request_id == "req-1"
        assert generation.referer == "https://a.example"

    def test_line_is_trimmed(self, validator):
        generation = validator.validate({"opponentLine": "\t 你懂什么 \n"})
        assert generation.opponent_line == "你懂什么"

    def test_snake_case_field_not_accepted(self, validator):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate({"opponent_line": "你懂什么"})

        assert exc_info.value.message == MSG_OPPONENT_LINE_NOT_STRING

    def test_unknown_fields_ignored(self, validator):
        generation = validator.validate({"opponentLine": "你懂什么", "mode": "nuclear"})
        assert generation.opponent_line == "你懂什么"

    def test_request_id_generated_when_missing(self, validator):
        assert validator.validate({"opponentLine": "x"}).request_id

    @pytest.mark.parametrize("value", [None, 42, ["你懂什么"], {"text": "你懂什么"}, True])
    def test_rejects_non_string_line(self, validator, value):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate({"opponentLine": value})

        assert exc_info.value.message == MSG_OPPONENT_LINE_NOT_STRING

    def test_rejects_missing_line(self, validator):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate({})

        assert exc_info.value.message == MSG_OPPONENT_LINE_NOT_STRING

    @pytest.mark.parametrize("value", ["", "   ", "\n\t"])
    def test_rejects_blank_line(self, validator, value):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate({"opponentLine": value})

        assert exc_info.value.message == MSG_OPPONENT_LINE_EMPTY

    @pytest.mark.parametrize("body", [[], "text", 3, None])
    def test_rejects_non_object_body(self, validator, body):
        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate(body)

        assert exc_info.value.message == MSG_BODY_NOT_JSON

    def test_length_limit_counts_trimmed_characters(self):
        validator = ArgueRequestValidator(max_length=4)

        assert validator.validate({"opponentLine": "  一二三四  "}).opponent_line == "一二三四"

        with pytest.raises(InvalidInputError) as exc_info:
            validator.validate({"opponentLine": "一二三四五"})

        assert exc_info.value.message == MSG_OPPONENT_LINE_TOO_LONG.format(limit=4)
        assert exc_info.value.details["length"] == 5

    def test_default_limit_from_settings(self, validator):
        assert validator.max_length == 800

    @pytest.mark.parametrize(
        "intensity, expected",
        [(None, 6), (1, 1), (10, 10), (0, 1), (99, 10), ("7", 7), ("loud", 6), (8.6, 8)],
    )
    def test_intensity_is_normalized_never_rejected(self, validator, intensity, expected):
        generation = validator.validate({"opponentLine": "你懂什么", "intensity": intensity})
        assert generation.intensity == expected
