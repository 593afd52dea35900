"""
Provider Test Factory

Builds real OpenRouterProvider instances on top of ``httpx.MockTransport`` so
the whole transport path (status handling, SSE decoding, error bodies) runs
in tests without a network.

Each candidate model is scripted independently: the transport reads the
``model`` field of the request body and answers with that model's script.
"""

from collections.abc import AsyncIterator, Callable, Iterable

import httpx
import orjson

from retort.llm_stream.providers import OpenRouterProvider, ProviderConfig

Script = Callable[[httpx.Request], httpx.Response]

TEST_BASE_URL = "https://openrouter.test/api/v1"


# ============================================================================
# Body builders
# ============================================================================


def delta_event(content) -> bytes:
    """One SSE event carrying a streamed delta."""
    payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return b"data: " + orjson.dumps(payload) + b"\n\n"


def sse_body(*deltas, done: bool = True) -> bytes:
    body = b"".join(delta_event(delta) for delta in deltas)
    if done:
        body += b"data: [DONE]\n\n"
    return body


def split_every(data: bytes, size: int) -> list[bytes]:
    """Cut bytes into fixed-size chunks, ignoring character boundaries."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class ChunkedStream(httpx.AsyncByteStream):
    """Async body that yields preset chunks, optionally failing afterwards."""

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None):
        self._chunks = list(chunks)
        self._error = error

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


# ============================================================================
# Scripts
# ============================================================================


class ProviderTestFactory:
    """Factory for scripted provider responses."""

    @staticmethod
    def sse(
        *deltas, chunk_size: int | None = None, content_type: str | None = "text/event-stream"
    ) -> Script:
        """Successful event stream of the given deltas; ``content_type=None`` omits the header."""
        body = sse_body(*deltas)
        headers = {"content-type": content_type} if content_type else {}

        def script(request: httpx.Request) -> httpx.Response:
            chunks = split_every(body, chunk_size) if chunk_size else [body]
            return httpx.Response(200, headers=headers, stream=ChunkedStream(chunks))

        return script

    @staticmethod
    def sse_then_disconnect(*deltas) -> Script:
        """Event stream that drops the connection after the given deltas."""
        body = sse_body(*deltas, done=False)

        def script(request: httpx.Request) -> httpx.Response:
            error = httpx.ReadError("connection reset by peer", request=request)
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                stream=ChunkedStream([body], error=error),
            )

        return script

    @staticmethod
    def json_completion(content) -> Script:
        """Non-streaming completion body."""

        def script(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]},
            )

        return script

    @staticmethod
    def error(status: int, payload=None, text: str | None = None) -> Script:
        """Failure status with a JSON payload or a raw text body."""

        def script(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=payload if payload is not None else {})

        return script

    @staticmethod
    def empty(status: int = 200) -> Script:
        def script(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, headers={"content-length": "0"}, content=b"")

        return script

    @staticmethod
    def unreachable() -> Script:
        def script(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        return script

    @staticmethod
    def broken(error: Exception | None = None) -> Script:
        """Handler raising a non-transport exception."""

        def script(request: httpx.Request) -> httpx.Response:
            raise error or RuntimeError("unexpected failure")

        return script


# ============================================================================
# Transport and provider
# ============================================================================


class ScriptedTransport:
    """
    MockTransport handler routing each request to its model's script.

    Attributes:
        requests: Every request received, in order
    """

    def __init__(self, scripts: dict[str, Script]):
        self.scripts = scripts
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        model = orjson.loads(request.content)["model"]
        return self.scripts[model](request)

    @property
    def requested_models(self) -> list[str]:
        return [orjson.loads(request.content)["model"] for request in self.requests]

    def payload(self, index: int = 0) -> dict:
        return orjson.loads(self.requests[index].content)


def make_provider(
    scripts: dict[str, Script], api_key: str = "sk-test-key"
) -> tuple[OpenRouterProvider, ScriptedTransport]:
    """OpenRouterProvider whose HTTP traffic is answered by ``scripts``."""
    transport = ScriptedTransport(scripts)
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    config = ProviderConfig(name="openrouter", api_key=api_key, base_url=TEST_BASE_URL)
    return OpenRouterProvider(config, client=client), transport
