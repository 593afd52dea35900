"""
Completion Providers Module

Transport to the chat-completion API plus the SSE and payload decoding the
stream orchestrator relies on.
"""

from .base_provider import BaseProvider, ProviderConfig, ProviderResponse
from .openrouter_provider import (
    HttpxProviderResponse,
    OpenRouterProvider,
    create_openrouter_provider,
)
from .payloads import extract_delta_text, extract_error_message, extract_message_content
from .sse_decoder import SSEDecoder

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "ProviderResponse",
    "HttpxProviderResponse",
    "OpenRouterProvider",
    "create_openrouter_provider",
    "SSEDecoder",
    "extract_delta_text",
    "extract_error_message",
    "extract_message_content",
]
