"""
Unit Tests for System Constants

Guards the values that shape prompts, failover and the wire format.
"""

import pytest

from retort.core.config.constants import (
    DEFAULT_INTENSITY,
    FAILURE_SEPARATOR,
    MAX_INTENSITY,
    MAX_REPLIES,
    MIN_INTENSITY,
    MSG_OPPONENT_LINE_TOO_LONG,
    RETRYABLE_ERROR_PHRASES,
    RETRYABLE_STATUS_FLOOR,
    Stage,
)


@pytest.mark.unit
class TestConstants:
    def test_intensity_bounds(self):
        assert MIN_INTENSITY <= DEFAULT_INTENSITY <= MAX_INTENSITY
        assert (MIN_INTENSITY, DEFAULT_INTENSITY, MAX_INTENSITY) == (1, 6, 10)

    def test_three_replies(self):
        assert MAX_REPLIES == 3

    def test_retryable_phrases_are_lowercase(self):
        assert all(phrase == phrase.lower() for phrase in RETRYABLE_ERROR_PHRASES)
        assert "no endpoints found" in RETRYABLE_ERROR_PHRASES

    def test_retry_floor_is_server_errors(self):
        assert RETRYABLE_STATUS_FLOOR == 500

    def test_separator_is_fullwidth_bar(self):
        assert FAILURE_SEPARATOR == " ｜ "

    def test_too_long_message_takes_limit(self):
        assert "800" in MSG_OPPONENT_LINE_TOO_LONG.format(limit=800)


@pytest.mark.unit
class TestEnums:
    def test_stage_values_are_unique(self):
        values = [stage.value for stage in Stage]
        assert len(values) == len(set(values))
