"""
Stream Orchestrator Service

The StreamOrchestrator drives one generation request from the first candidate
model to the terminal frame. It does not talk HTTP itself: the provider opens
upstream responses, the reply extractor turns text into replies, and the
orchestrator decides what happens next.

THE CANDIDATE LOOP:
-------------------
For each model in the configured fallback chain, in order:

┌─────────────────────────────────────────────────────────────────┐
│ STAGE 2: MODEL ATTEMPT                                          │
│ - Announce the candidate with a ``model`` frame                 │
│ - Build prompt and sampling parameters from the intensity       │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 3: PROVIDER REQUEST                                       │
│ - Non-success status: classify as RETRY or FATAL                │
│ - Unreachable provider: RETRY with status 502                   │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 4/5: DECODE AND EXTRACT                                   │
│ - Append each delta to the attempt's text                       │
│ - Re-run extraction, emit ``partial`` when the replies change   │
└─────────────────────────────────────────────────────────────────┘
                            ↓
┌─────────────────────────────────────────────────────────────────┐
│ STAGE 6: COMPLETION                                             │
│ - Replies found: ``complete`` frame, stop                       │
│ - Nothing usable: record failure, next candidate                │
└─────────────────────────────────────────────────────────────────┘

When every candidate fails the collected FailureRecords are folded into a
single ``error`` frame. Every stream ends with exactly one terminal frame.

DEPENDENCY INJECTION:
---------------------
The provider and settings are passed in; tests hand in an OpenRouterProvider
backed by ``httpx.MockTransport``.
"""

from collections.abc import AsyncGenerator, Sequence
from contextlib import aclosing
from dataclasses import dataclass

from retort.core.config.constants import (
    FAILURE_SEPARATOR,
    MSG_EMPTY_RESPONSE,
    MSG_MODEL_REQUEST_FAILED,
    MSG_NO_USABLE_ANSWER,
    MSG_SERVICE_UNAVAILABLE,
    RETRYABLE_ERROR_PHRASES,
    RETRYABLE_STATUS_FLOOR,
    UPSTREAM_FAILURE_STATUS,
    Stage,
)
from retort.core.config.settings import Settings
from retort.core.exceptions import ProviderNotAvailableError
from retort.core.logging.logger import get_logger, log_stage, set_request_id
from retort.llm_stream.extraction import DEFAULT_STRATEGIES, Strategy, collect_replies
from retort.llm_stream.models import (
    AttemptOutcome,
    AttemptResult,
    CompleteFrame,
    ErrorFrame,
    FailureRecord,
    GenerationRequest,
    ModelFrame,
    PartialFrame,
    StreamFrame,
    encode_frame,
)
from retort.llm_stream.prompts import build_completion_payload
from retort.llm_stream.providers import (
    BaseProvider,
    extract_delta_text,
    extract_error_message,
)

logger = get_logger(__name__)


# ============================================================================
# FAILURE POLICY
# ============================================================================


def is_retryable_failure(status: int, message: str) -> bool:
    """
    Whether a failed candidate should hand over to the next one.

    Server-side statuses are always retryable; client-side statuses only when
    the message carries a known transient-upstream phrase.
    """
    if status >= RETRYABLE_STATUS_FLOOR:
        return True
    lowered = message.lower()
    return any(phrase in lowered for phrase in RETRYABLE_ERROR_PHRASES)


def aggregate_failures(failures: Sequence[FailureRecord]) -> ErrorFrame:
    """
    Fold the failures of an exhausted chain into one error frame.

    The first failure contributes its bare message and its status; later
    failures are appended as ``"<model>: <message>"``.
    """
    if not failures:
        return ErrorFrame(error=MSG_MODEL_REQUEST_FAILED, status=UPSTREAM_FAILURE_STATUS)

    first, *rest = failures
    parts = [first.message, *(f"{failure.model}: {failure.message}" for failure in rest)]
    combined = FAILURE_SEPARATOR.join(part for part in parts if part)
    return ErrorFrame(error=combined or MSG_MODEL_REQUEST_FAILED, status=first.status)


# ============================================================================
# ATTEMPT STATE
# ============================================================================


@dataclass
class AttemptState:
    """
    Mutable state of one candidate attempt.

    A fresh instance is created per candidate, so text from a failed model
    never leaks into the next one.
    """

    model: str
    text: str = ""
    replies: tuple[str, ...] = ()
    delta_count: int = 0

    def append(self, delta: str, strategies: tuple[Strategy, ...]) -> tuple[str, ...] | None:
        """
        Add a delta and re-run extraction.

        Returns:
            The new replies when they differ from the last ones sent, else None
        """
        self.text += delta
        self.delta_count += 1
        replies = collect_replies(self.text, strategies)
        if replies and replies != self.replies:
            self.replies = replies
            return replies
        return None

    def final_replies(self, strategies: tuple[Strategy, ...]) -> tuple[str, ...]:
        return collect_replies(self.text.strip(), strategies)


# ============================================================================
# STREAM ORCHESTRATOR CLASS
# ============================================================================


class StreamOrchestrator:
    """
    Sequential failover over the configured model chain.

    Usage:
        orchestrator = StreamOrchestrator(provider, settings)
        async for frame in orchestrator.stream(request):
            ...

    The orchestrator holds no per-request state; one instance serves every
    request of the application.
    """

    def __init__(
        self,
        provider: BaseProvider,
        settings: Settings,
        strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
    ):
        """
        Initialize orchestrator.

        Args:
            provider: Completion provider
            settings: Application configuration (model chain)
            strategies: Reply extraction chain
        """
        self._provider = provider
        self.settings = settings
        self._strategies = strategies

        logger.info(
            "StreamOrchestrator initialized",
            stage=Stage.INITIALIZATION.value,
            provider=provider.name,
            models=list(settings.model_candidates),
        )

    @property
    def model_candidates(self) -> tuple[str, ...]:
        return self.settings.model_candidates

    async def stream(self, request: GenerationRequest) -> AsyncGenerator[StreamFrame, None]:
        """
        Run the candidate loop for one request.

        Args:
            request: Validated generation request

        Yields:
            StreamFrame: ``model`` and ``partial`` frames, then exactly one
            ``complete`` or ``error`` frame
        """
        set_request_id(request.request_id)
        failures: list[FailureRecord] = []

        try:
            for model in self.model_candidates:
                log_stage(
                    logger,
                    Stage.MODEL_ATTEMPT,
                    "Trying model",
                    model=model,
                    intensity=request.intensity,
                    attempt=len(failures) + 1,
                )
                yield ModelFrame(model=model)

                result: AttemptResult | None = None
                async with aclosing(self._attempt_model(model, request)) as attempt:
                    async for item in attempt:
                        if isinstance(item, AttemptResult):
                            result = item
                        else:
                            yield item

                if result.outcome is AttemptOutcome.SUCCESS:
                    log_stage(
                        logger,
                        Stage.COMPLETION,
                        "Generation complete",
                        model=model,
                        reply_count=len(result.replies),
                    )
                    yield CompleteFrame(replies=result.replies)
                    return

                failure = result.failure
                failures.append(failure)

                if result.outcome is AttemptOutcome.FATAL:
                    log_stage(
                        logger,
                        Stage.COMPLETION,
                        "Non-retryable provider error",
                        level="warning",
                        model=model,
                        status=failure.status,
                        error=failure.message,
                    )
                    yield ErrorFrame(error=failure.message, status=failure.status)
                    return

                log_stage(
                    logger,
                    Stage.FALLBACK,
                    "Model failed, moving to next candidate",
                    level="warning",
                    model=model,
                    status=failure.status,
                    error=failure.message,
                )

            frame = aggregate_failures(failures)
            log_stage(
                logger,
                Stage.COMPLETION,
                "All candidate models failed",
                level="error",
                status=frame.status,
                failed_models=[failure.model for failure in failures],
            )
            yield frame

        except Exception as e:
            logger.error(
                "Streaming pipeline failed",
                stage=Stage.COMPLETION.value,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            yield ErrorFrame(error=MSG_SERVICE_UNAVAILABLE, status=500)

    async def stream_bytes(self, request: GenerationRequest) -> AsyncGenerator[bytes, None]:
        """NDJSON encoding of ``stream`` for the HTTP layer."""
        async for frame in self.stream(request):
            yield encode_frame(frame)

    async def _attempt_model(
        self, model: str, request: GenerationRequest
    ) -> AsyncGenerator[PartialFrame | AttemptResult, None]:
        """
        Try one candidate.

        Yields PartialFrames as replies change and finishes with exactly one
        AttemptResult.
        """
        state = AttemptState(model=model)
        payload = build_completion_payload(model, request)

        try:
            async with self._provider.open_stream(payload, referer=request.referer) as response:
                # STAGE-3.1: Non-success status
                if not response.ok:
                    error_payload = await response.read_error_payload()
                    message = extract_error_message(error_payload)
                    failure = FailureRecord(model=model, status=response.status_code, message=message)
                    outcome = (
                        AttemptOutcome.RETRY
                        if is_retryable_failure(failure.status, message)
                        else AttemptOutcome.FATAL
                    )
                    log_stage(
                        logger,
                        Stage.PROVIDER_REQUEST,
                        "Provider returned error status",
                        level="warning",
                        model=model,
                        status=failure.status,
                        error=message,
                        outcome=outcome.value,
                    )
                    yield AttemptResult(outcome=outcome, failure=failure)
                    return

                if not response.has_body:
                    yield AttemptResult(
                        outcome=AttemptOutcome.RETRY,
                        failure=FailureRecord(
                            model=model, status=UPSTREAM_FAILURE_STATUS, message=MSG_EMPTY_RESPONSE
                        ),
                    )
                    return

                # STAGE-4/5: Incremental decode and extraction
                async for chunk in response.iter_payloads():
                    delta = extract_delta_text(chunk)
                    if not delta:
                        continue
                    replies = state.append(delta, self._strategies)
                    if replies is not None:
                        yield PartialFrame(replies=replies)

        except ProviderNotAvailableError as e:
            # Progress from this candidate is dropped
            yield AttemptResult(
                outcome=AttemptOutcome.RETRY,
                failure=FailureRecord(model=model, status=UPSTREAM_FAILURE_STATUS, message=e.message),
            )
            return

        log_stage(
            logger,
            Stage.REPLY_EXTRACTION,
            "Upstream stream finished",
            model=model,
            deltas=state.delta_count,
            text_length=len(state.text),
        )

        replies = state.final_replies(self._strategies)
        if replies:
            yield AttemptResult(outcome=AttemptOutcome.SUCCESS, replies=replies)
        else:
            yield AttemptResult(
                outcome=AttemptOutcome.RETRY,
                failure=FailureRecord(
                    model=model, status=UPSTREAM_FAILURE_STATUS, message=MSG_NO_USABLE_ANSWER
                ),
            )
