"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from retort.core.config import settings as settings_module  # noqa: E402
from retort.core.logging.logger import clear_request_id  # noqa: E402
from tests.test_fixtures.provider_factory import ProviderTestFactory, make_provider  # noqa: E402
from tests.test_fixtures.request_factory import RequestFactory  # noqa: E402

TEST_MODELS = "model-a,model-b"

# Variables that would leak a developer's real configuration into tests
_MANAGED_ENV = (
    "OPENROUTER_API_KEY",
    "OPENROUTER_MODEL",
    "OPENROUTER_MODELS",
    "OPENROUTER_BASE_URL",
    "OPPONENT_LINE_MAX_LENGTH",
    "API_BASE_PATH",
)


# ============================================================================
# Settings Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """
    Give every test a clean settings singleton and request-id context.

    Tests that need specific configuration set environment variables with
    ``monkeypatch`` and call ``reload_settings()``.
    """
    for name in _MANAGED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    settings_module._settings = None
    yield
    settings_module._settings = None
    clear_request_id()


@pytest.fixture
def configured_env(monkeypatch):
    """Environment with an API key and a two-model fallback chain."""
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test-key")
    monkeypatch.setenv("OPENROUTER_MODELS", TEST_MODELS)
    return settings_module.reload_settings()


@pytest.fixture
def test_settings():
    """Explicit Settings instance with an API key and the two test models."""
    return settings_module.Settings(
        OPENROUTER_API_KEY="sk-test-key",
        OPENROUTER_MODELS=TEST_MODELS,
        ENVIRONMENT="test",
    )


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def provider_factory():
    return ProviderTestFactory


@pytest.fixture
def scripted_provider():
    """
    Build an OpenRouterProvider answered by per-model scripts.

    Usage:
        provider, transport = scripted_provider({"model-a": ProviderTestFactory.sse(...)})
    """
    return make_provider


@pytest.fixture
def sample_request():
    """Sample GenerationRequest with typical values."""
    return RequestFactory.basic()


@pytest.fixture
def sample_body():
    return RequestFactory.body()


@pytest.fixture
def three_replies():
    return ("你这话说得真有意思。", "方案行不行，数据说了算！", "先把你的方案拿出来看看？")
