"""
Base Provider Abstract Class

This module defines the abstract base class for chat-completion providers and
the response handle the orchestrator consumes.

Architectural Decision: the provider owns the transport, the orchestrator owns
the policy
- Providers open one streaming request per candidate model
- Transport failures surface as ProviderNotAvailableError
- Status classification and failover stay in the orchestrator
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from retort.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProviderConfig:
    """
    Configuration for a completion provider.

    Attributes:
        name: Provider name
        api_key: API key for authentication
        base_url: Base URL for API
        timeout: Request timeout in seconds
        app_title: Value of the X-Title attribution header
        default_referer: HTTP-Referer when the caller sends no origin
    """
    name: str
    api_key: str
    base_url: str
    timeout: float = 60.0
    app_title: str = "Chaojia"
    default_referer: str = "https://localhost-placeholder"


class ProviderResponse(ABC):
    """
    One open provider response.

    Valid only inside the ``open_stream`` context that produced it.
    """

    @property
    @abstractmethod
    def status_code(self) -> int:
        pass

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    @abstractmethod
    def has_body(self) -> bool:
        """False when a success status arrives without a body."""
        pass

    @abstractmethod
    async def read_error_payload(self) -> Any:
        """
        Whole body of a failed response.

        Returns:
            Parsed JSON, ``{"error": <text>}`` when the body is not JSON, or
            None when the body cannot be read at all
        """
        pass

    @abstractmethod
    def iter_payloads(self) -> AsyncIterator[Any]:
        """
        Decoded JSON payloads of a successful response, in arrival order.

        Raises:
            ProviderNotAvailableError: If the connection fails mid-body
        """
        pass


class BaseProvider(ABC):
    """
    Abstract base class for completion providers.

    Subclasses must implement:
    - open_stream(): open one streaming completion request
    - aclose(): release pooled connections

    Usage:
        async with provider.open_stream(payload, referer) as response:
            if not response.ok:
                error = await response.read_error_payload()
            async for payload in response.iter_payloads():
                ...
    """

    def __init__(self, config: ProviderConfig):
        """
        Initialize base provider.

        STAGE-0.4: Provider initialization

        Args:
            config: Provider configuration
        """
        self.config = config
        self.name = config.name

        logger.info(
            "Provider initialized",
            stage="0.4",
            provider=config.name,
            base_url=config.base_url[:50] + "..." if len(config.base_url) > 50 else config.base_url,
        )

    @abstractmethod
    def open_stream(
        self, payload: dict[str, Any], referer: str | None = None
    ) -> AbstractAsyncContextManager[ProviderResponse]:
        """
        Open one streaming completion request.

        STAGE-3.0: Provider request

        Args:
            payload: Chat-completion request body (carries ``model``)
            referer: Caller origin forwarded as HTTP-Referer

        Raises:
            ProviderNotAvailableError: If the provider cannot be reached
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        pass
