"""
Retort Client

Async client for the argue endpoint. Consumes the NDJSON frame stream the
way the browser front end does: frames are decoded line by line as they
arrive, ``partial`` frames are surfaced for progressive display and the
final replies come from the ``complete`` frame.

Usage:
    async with RetortClient("http://localhost:8000") as client:
        async for frame in client.stream("你这方案根本行不通", intensity=7):
            print(frame)

        replies = await client.generate("你这方案根本行不通", intensity=7)
"""

from collections.abc import AsyncIterator
from typing import Any

import httpx
import orjson

from retort.core.config.constants import (
    DATA_POLICY_PHRASE,
    DEFAULT_INTENSITY,
    MAX_REPLIES,
    MSG_CLIENT_EMPTY_LINE,
    MSG_CLIENT_NO_CONTENT,
    MSG_DATA_POLICY_BLOCKED,
    MSG_GENERATION_FAILED,
    MSG_PROVIDER_UNSTABLE,
    NDJSON_MEDIA_TYPE,
    PROVIDER_ERROR_PHRASE,
)
from retort.core.exceptions import FrameDecodeError, RetortBaseError
from retort.core.logging.logger import get_logger
from retort.llm_stream.models import (
    CompleteFrame,
    ErrorFrame,
    StreamFrame,
    decode_frame,
)

logger = get_logger(__name__)


class RetortClientError(RetortBaseError):
    """
    User-facing generation failure.

    ``message`` is ready for display; ``status`` is the HTTP or in-band error
    status when the server supplied one.
    """

    @property
    def status(self) -> int | None:
        return self.details.get("status")


def humanize_error_message(raw: str | None) -> str:
    """Map known provider error texts to actionable guidance."""
    message = (raw or "").strip()
    if not message:
        return MSG_GENERATION_FAILED
    if DATA_POLICY_PHRASE in message:
        return MSG_DATA_POLICY_BLOCKED
    if PROVIDER_ERROR_PHRASE in message.lower():
        return MSG_PROVIDER_UNSTABLE
    return message


def normalize_error_payload(problem: Any) -> str:
    """Message of a non-2xx JSON body: ``error`` string or ``error.message``."""
    if not isinstance(problem, dict):
        return MSG_GENERATION_FAILED
    error = problem.get("error")
    if isinstance(error, str):
        return humanize_error_message(error)
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return humanize_error_message(error["message"])
    return MSG_GENERATION_FAILED


def normalize_replies(candidate: Any) -> tuple[str, ...]:
    if not isinstance(candidate, (list, tuple)):
        return ()
    replies = (item.strip() for item in candidate if isinstance(item, str))
    return tuple(reply for reply in replies if reply)[:MAX_REPLIES]


class RetortClient:
    """
    Client for ``POST {base_url}/api/argue``.

    Args:
        base_url: Service root, e.g. ``http://localhost:8000``
        client: Optional preconfigured ``httpx.AsyncClient`` (closed by the
            caller); one is created and owned otherwise
        api_base_path: Route prefix configured on the server
        timeout: Read timeout for the owned client
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        api_base_path: str = "/api",
        timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_base_path = api_base_path
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def argue_url(self) -> str:
        return f"{self.base_url}{self.api_base_path}/argue"

    async def __aenter__(self) -> "RetortClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def stream(
        self, opponent_line: str, intensity: int | str = DEFAULT_INTENSITY
    ) -> AsyncIterator[StreamFrame]:
        """
        Yield frames as they arrive.

        Undecodable lines are logged and skipped. A server that answers with
        a plain JSON ``{"replies": [...]}`` body yields a single CompleteFrame.

        Raises:
            RetortClientError: On a non-2xx response
        """
        body = {"opponentLine": opponent_line, "intensity": intensity}
        async with self._client.stream(
            "POST",
            self.argue_url,
            content=orjson.dumps(body),
            headers={"Content-Type": "application/json"},
        ) as response:
            if not response.is_success:
                await response.aread()
                raise RetortClientError(
                    normalize_error_payload(self._safe_json(response.content)),
                    details={"status": response.status_code},
                )

            content_type = response.headers.get("content-type", "")
            if NDJSON_MEDIA_TYPE not in content_type:
                await response.aread()
                payload = self._safe_json(response.content)
                replies = normalize_replies(payload.get("replies") if isinstance(payload, dict) else None)
                yield CompleteFrame(replies=replies)
                return

            buffer = ""
            async for text in response.aiter_text():
                buffer += text
                *lines, buffer = buffer.split("\n")
                for line in lines:
                    frame = self._decode_line(line)
                    if frame is not None:
                        yield frame

            frame = self._decode_line(buffer)
            if frame is not None:
                yield frame

    async def generate(
        self, opponent_line: str, intensity: int | str = DEFAULT_INTENSITY
    ) -> tuple[str, ...]:
        """
        Run one generation and return the final replies.

        Raises:
            RetortClientError: On blank input, an ``error`` frame, a non-2xx
                response, or a stream that ends without replies
        """
        line = opponent_line.strip()
        if not line:
            raise RetortClientError(MSG_CLIENT_EMPTY_LINE)

        final: tuple[str, ...] | None = None
        async for frame in self.stream(line, intensity):
            if isinstance(frame, ErrorFrame):
                raise RetortClientError(
                    humanize_error_message(frame.error), details={"status": frame.status}
                )
            if isinstance(frame, CompleteFrame):
                replies = normalize_replies(frame.replies)
                if replies:
                    final = replies

        if not final:
            raise RetortClientError(MSG_CLIENT_NO_CONTENT)
        return final

    @staticmethod
    def _decode_line(line: str) -> StreamFrame | None:
        trimmed = line.strip()
        if not trimmed:
            return None
        try:
            return decode_frame(trimmed)
        except FrameDecodeError as e:
            logger.warning("Ignoring undecodable stream line", line=trimmed[:80], error=e.message)
            return None

    @staticmethod
    def _safe_json(raw: bytes) -> Any:
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            return None
