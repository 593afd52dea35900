"""
Stream Services

Request orchestration: candidate failover, attempt classification and
frame emission.
"""

from .stream_orchestrator import (
    AttemptState,
    StreamOrchestrator,
    aggregate_failures,
    is_retryable_failure,
)

__all__ = [
    "AttemptState",
    "StreamOrchestrator",
    "aggregate_failures",
    "is_retryable_failure",
]
