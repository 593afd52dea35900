"""
OpenRouter Provider

httpx implementation of the completion provider against OpenRouter's
OpenAI-compatible ``/chat/completions`` endpoint.

Every body is decoded incrementally with SSEDecoder whatever its declared
content type. A provider that ignores ``stream: true`` and answers with a
single JSON document produces no ``data:`` events; that document is then
yielded as the only payload.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import orjson

from retort.core.config.constants import (
    HEADER_REFERER,
    HEADER_TITLE,
    MSG_API_KEY_MISSING,
    Stage,
)
from retort.core.config.settings import Settings
from retort.core.exceptions import ConfigurationError, ProviderNotAvailableError
from retort.core.logging.logger import get_logger, log_stage
from retort.llm_stream.providers.base_provider import (
    BaseProvider,
    ProviderConfig,
    ProviderResponse,
)
from retort.llm_stream.providers.sse_decoder import SSEDecoder

logger = get_logger(__name__)


class HttpxProviderResponse(ProviderResponse):
    """ProviderResponse over a streamed ``httpx.Response``."""

    def __init__(self, response: httpx.Response, model: str):
        self._response = response
        self.model = model

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def content_type(self) -> str:
        return self._response.headers.get("content-type", "").lower()

    @property
    def has_body(self) -> bool:
        if self.status_code == 204:
            return False
        return self._response.headers.get("content-length") != "0"

    async def read_error_payload(self) -> Any:
        try:
            raw = await self._response.aread()
        except httpx.HTTPError as e:
            logger.warning(
                "Could not read provider error body",
                stage="3.1",
                model=self.model,
                error_type=type(e).__name__,
            )
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            return {"error": raw.decode("utf-8", errors="replace")}

    async def iter_payloads(self) -> AsyncIterator[Any]:
        decoder = SSEDecoder()
        # Buffered only until the first data event shows the body is SSE
        body = bytearray()
        saw_event = False
        try:
            async for chunk in self._response.aiter_bytes():
                if not saw_event:
                    body.extend(chunk)
                for data in decoder.feed(chunk):
                    saw_event = True
                    payload = self._parse(data)
                    if payload is not None:
                        yield payload
        except httpx.TransportError as e:
            raise ProviderNotAvailableError.from_exception(
                e, message=f"Connection to provider lost: {type(e).__name__}", model=self.model
            ) from e

        for data in decoder.flush():
            saw_event = True
            payload = self._parse(data)
            if payload is not None:
                yield payload

        if not saw_event and body.lstrip().startswith(b"{"):
            log_stage(
                logger,
                Stage.STREAM_DECODE,
                "No SSE events in body, reading it as one JSON document",
                model=self.model,
                content_type=self.content_type,
            )
            payload = self._parse(bytes(body))
            if payload is not None:
                yield payload

    def _parse(self, data: str | bytes) -> Any:
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError:
            log_stage(
                logger,
                Stage.STREAM_DECODE,
                "Skipping undecodable payload",
                level="warning",
                model=self.model,
                payload_preview=data[:80] if isinstance(data, str) else data[:80].decode("utf-8", "replace"),
            )
            return None


class OpenRouterProvider(BaseProvider):
    """
    OpenRouter chat-completion provider.

    One ``httpx.AsyncClient`` is shared by all requests; pass your own client
    to control transport (tests use ``httpx.MockTransport``).

    Usage:
        provider = OpenRouterProvider(config)
        async with provider.open_stream(payload, referer="https://example.com") as response:
            async for chunk in response.iter_payloads():
                ...
        await provider.aclose()
    """

    def __init__(self, config: ProviderConfig, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))

    @property
    def completions_url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def build_headers(self, referer: str | None = None) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            HEADER_REFERER: referer or self.config.default_referer,
            HEADER_TITLE: self.config.app_title,
        }

    @asynccontextmanager
    async def open_stream(
        self, payload: dict[str, Any], referer: str | None = None
    ) -> AsyncIterator[HttpxProviderResponse]:
        model = payload.get("model", "")
        request = self._client.build_request(
            "POST",
            self.completions_url,
            headers=self.build_headers(referer),
            content=orjson.dumps(payload),
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.TransportError as e:
            log_stage(
                logger,
                Stage.PROVIDER_REQUEST,
                "Provider unreachable",
                level="warning",
                model=model,
                error_type=type(e).__name__,
            )
            raise ProviderNotAvailableError.from_exception(
                e, message=f"Provider unreachable: {type(e).__name__}", model=model
            ) from e

        log_stage(
            logger,
            Stage.PROVIDER_REQUEST,
            "Provider responded",
            model=model,
            status=response.status_code,
            content_type=response.headers.get("content-type"),
        )

        try:
            yield HttpxProviderResponse(response, model)
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_openrouter_provider(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> OpenRouterProvider:
    """
    Build the provider from application settings.

    Raises:
        ConfigurationError: If no API key is configured
    """
    llm = settings.llm
    if not llm.OPENROUTER_API_KEY:
        raise ConfigurationError(MSG_API_KEY_MISSING, details={"setting": "OPENROUTER_API_KEY"})
    config = ProviderConfig(
        name="openrouter",
        api_key=llm.OPENROUTER_API_KEY,
        base_url=llm.OPENROUTER_BASE_URL,
        timeout=llm.OPENROUTER_TIMEOUT,
        app_title=llm.OPENROUTER_APP_TITLE,
        default_referer=llm.DEFAULT_REFERER,
    )
    return OpenRouterProvider(config, client=client)
