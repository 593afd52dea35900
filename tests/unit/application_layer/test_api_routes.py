"""
Unit Tests for API Routes

Tests FastAPI routes with TestClient: request rejection, configuration
errors, the NDJSON stream and the informational endpoints.
"""

from types import SimpleNamespace

import orjson
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from retort.application.api.dependencies import get_orchestrator
from retort.application.api.middleware import ErrorHandlingMiddleware
from retort.application.app import create_app
from retort.core.config.constants import (
    MSG_API_KEY_MISSING,
    MSG_BODY_NOT_JSON,
    MSG_OPPONENT_LINE_EMPTY,
    MSG_OPPONENT_LINE_NOT_STRING,
    MSG_OPPONENT_LINE_TOO_LONG,
    MSG_SERVICE_UNAVAILABLE,
)
from retort.llm_stream.services import StreamOrchestrator
from tests.test_fixtures.provider_factory import ProviderTestFactory as scripts

ARGUE_URL = "/api/argue"


def parse_ndjson(text: str) -> list[dict]:
    return [orjson.loads(line) for line in text.splitlines() if line.strip()]


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def stub_orchestrator(app, scripted_provider, test_settings):
    """Install an orchestrator over scripted models; returns the transport."""

    def _install(model_scripts):
        provider, transport = scripted_provider(model_scripts)
        orchestrator = StreamOrchestrator(provider, test_settings)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return transport

    yield _install
    app.dependency_overrides.clear()


@pytest.mark.unit
class TestRequestRejection:
    """Invalid bodies are answered with 400 {"error": ...} before streaming."""

    @pytest.mark.parametrize(
        "body, message",
        [
            ({"opponentLine": ""}, MSG_OPPONENT_LINE_EMPTY),
            ({"opponentLine": "   \n  "}, MSG_OPPONENT_LINE_EMPTY),
            ({"opponentLine": 123}, MSG_OPPONENT_LINE_NOT_STRING),
            ({"intensity": 5}, MSG_OPPONENT_LINE_NOT_STRING),
            ({"opponent_line": "你懂什么"}, MSG_OPPONENT_LINE_NOT_STRING),
            ({"opponentLine": "x" * 801}, MSG_OPPONENT_LINE_TOO_LONG.format(limit=800)),
            ([1, 2, 3], MSG_BODY_NOT_JSON),
        ],
    )
    def test_invalid_body(self, client, body, message):
        response = client.post(ARGUE_URL, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": message}

    def test_malformed_json(self, client):
        response = client.post(
            ARGUE_URL, content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": MSG_BODY_NOT_JSON}

    def test_validation_runs_before_key_check(self, client):
        # No API key is configured in tests by default
        response = client.post(ARGUE_URL, json={"opponentLine": ""})

        assert response.status_code == 400

    def test_configured_length_limit(self, monkeypatch):
        monkeypatch.setenv("OPPONENT_LINE_MAX_LENGTH", "5")
        client = TestClient(create_app())

        response = client.post(ARGUE_URL, json={"opponentLine": "一二三四五六"})

        assert response.status_code == 400
        assert response.json() == {"error": MSG_OPPONENT_LINE_TOO_LONG.format(limit=5)}


@pytest.mark.unit
class TestConfigurationErrors:
    def test_missing_api_key(self, client):
        response = client.post(ARGUE_URL, json={"opponentLine": "你懂什么"})

        assert response.status_code == 500
        assert response.json() == {"error": MSG_API_KEY_MISSING}

    async def test_orchestrator_built_lazily_and_cached(self, configured_env):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))

        first = get_orchestrator(request)
        second = get_orchestrator(request)

        assert isinstance(first, StreamOrchestrator)
        assert first is second
        assert first.model_candidates == ("model-a", "model-b")
        await request.app.state.provider.aclose()


@pytest.mark.unit
class TestArgueStreaming:
    def test_streams_frames(self, client, stub_orchestrator, three_replies):
        stub_orchestrator(
            {"model-a": scripts.sse('["你这话说得真有意思。", "方案行不行，数据说了算！", "先把你的方案拿出来看看？"]')}
        )

        response = client.post(ARGUE_URL, json={"opponentLine": "  你这方案根本行不通  ", "intensity": 7})

        assert response.status_code == 200
        frames = parse_ndjson(response.text)
        assert frames[0] == {"type": "model", "model": "model-a"}
        assert frames[-1] == {"type": "complete", "replies": list(three_replies)}

    def test_stream_headers(self, client, stub_orchestrator):
        stub_orchestrator({"model-a": scripts.sse('["好的回复。"]')})

        response = client.post(
            ARGUE_URL, json={"opponentLine": "你懂什么"}, headers={"X-Request-ID": "req-abc"}
        )

        assert response.headers["content-type"].startswith("application/x-ndjson")
        assert response.headers["cache-control"] == "no-cache, no-transform"
        assert response.headers["x-accel-buffering"] == "no"
        assert response.headers["x-request-id"] == "req-abc"

    def test_line_is_trimmed_and_origin_forwarded(self, client, stub_orchestrator):
        transport = stub_orchestrator({"model-a": scripts.sse('["好的回复。"]')})

        client.post(
            ARGUE_URL,
            json={"opponentLine": "  你懂什么  ", "intensity": "9级"},
            headers={"Origin": "https://app.example.com"},
        )

        payload = transport.payload(0)
        assert "对方的话：你懂什么\n" in payload["messages"][1]["content"]
        assert "9/10" in payload["messages"][1]["content"]
        assert transport.requests[0].headers["http-referer"] == "https://app.example.com"

    def test_upstream_failure_is_in_band(self, client, stub_orchestrator):
        stub_orchestrator(
            {
                "model-a": scripts.error(503, {"error": "Service down"}),
                "model-b": scripts.error(502, text="Bad gateway"),
            }
        )

        response = client.post(ARGUE_URL, json={"opponentLine": "你懂什么"})

        assert response.status_code == 200
        frames = parse_ndjson(response.text)
        assert [frame["type"] for frame in frames] == ["model", "model", "error"]
        assert frames[-1] == {"type": "error", "error": "Service down ｜ model-b: Bad gateway", "status": 503}


@pytest.mark.unit
class TestInformationalRoutes:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")
        assert data["version"] == "1.0.0"

    def test_health_lists_models(self, configured_env):
        response = TestClient(create_app()).get("/api/health")

        assert response.json()["models"] == ["model-a", "model-b"]

    def test_root(self, client):
        data = client.get("/").json()

        assert data["argue"] == "/api/argue"
        assert data["health"] == "/api/health"

    def test_request_id_generated_when_absent(self, client):
        response = client.get("/api/health")
        assert response.headers["x-request-id"]


@pytest.mark.unit
class TestErrorHandlingMiddleware:
    @pytest.fixture
    def failing_app(self):
        def _build(include_traceback=False):
            app = FastAPI()
            app.add_middleware(ErrorHandlingMiddleware, include_traceback=include_traceback)

            @app.get("/boom")
            async def boom():
                raise RuntimeError("kaboom")

            return TestClient(app)

        return _build

    def test_generic_500(self, failing_app):
        response = failing_app().get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": MSG_SERVICE_UNAVAILABLE}

    def test_traceback_in_development(self, failing_app):
        data = failing_app(include_traceback=True).get("/boom").json()

        assert data["error_type"] == "RuntimeError"
        assert data["detail"] == "kaboom"
        assert "Traceback" in data["traceback"]
