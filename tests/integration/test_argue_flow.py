"""
Integration Tests for the Argue Flow

Client, HTTP layer, orchestrator and provider wired together in-process.
"""

import httpx
import pytest

from retort.application.api.dependencies import get_orchestrator
from retort.application.app import create_app
from retort.client import RetortClient, RetortClientError
from retort.core.config.constants import MSG_OPPONENT_LINE_TOO_LONG, MSG_PROVIDER_UNSTABLE
from retort.llm_stream.services import StreamOrchestrator
from tests.test_fixtures.provider_factory import ProviderTestFactory as scripts

BASE_URL = "http://retort.test"


@pytest.fixture
def wire(scripted_provider, test_settings):
    """Build a RetortClient talking to a fresh app over scripted models."""
    def _wire(model_scripts):
        app = create_app()
        provider, transport = scripted_provider(model_scripts)
        orchestrator = StreamOrchestrator(provider, test_settings)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)
        return RetortClient(BASE_URL, client=http), transport

    return _wire


@pytest.mark.integration
class TestArgueFlow:
    async def test_generate_after_failover(self, wire):
        client, transport = wire(
            {
                "model-a": scripts.error(503, {"error": {"message": "Upstream error"}}),
                "model-b": scripts.sse('["第一条。", ', '"第二条！", "第三条？"]', chunk_size=9),
            }
        )

        replies = await client.generate("你这方案根本行不通", intensity=8)

        assert replies == ("第一条。", "第二条！", "第三条？")
        assert transport.requested_models == ["model-a", "model-b"]

    async def test_stream_reports_each_candidate(self, wire):
        client, _ = wire(
            {"model-a": scripts.unreachable(), "model-b": scripts.sse('["换个模型。"]')}
        )

        frames = [frame async for frame in client.stream("你懂什么")]

        models = [frame.model for frame in frames if frame.type == "model"]
        assert models == ["model-a", "model-b"]
        assert frames[-1].type == "complete"

    async def test_in_band_error_is_humanized(self, wire):
        client, _ = wire(
            {
                "model-a": scripts.error(502, {"error": "Provider returned error"}),
                "model-b": scripts.error(503, {"error": "Provider returned error"}),
            }
        )

        with pytest.raises(RetortClientError) as exc_info:
            await client.generate("你懂什么")

        assert exc_info.value.message == MSG_PROVIDER_UNSTABLE
        assert exc_info.value.status == 502

    async def test_validation_error_reaches_client(self, wire):
        client, transport = wire({})

        with pytest.raises(RetortClientError) as exc_info:
            await client.generate("长" * 801)

        assert exc_info.value.message == MSG_OPPONENT_LINE_TOO_LONG.format(limit=800)
        assert exc_info.value.status == 400
        assert transport.requests == []
