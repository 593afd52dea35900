"""
Base Exception Class

This module contains the base exception class that all other exceptions
inherit from, plus ConfigurationError. Specialized exceptions live in their
themed modules.
"""

from typing import Any


class RetortBaseError(Exception):
    """
    Base exception for all retort service errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Request ID correlation
    - Structured error logging

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise ProviderNotAvailableError(
            "Provider unreachable: ConnectError",
            request_id="abc-123",
            details={"model": "deepseek/deepseek-chat-v3.1:free"}
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details
    ) -> "RetortBaseError":
        """
        Create an error from another exception.

        Useful for wrapping third-party exceptions (httpx, json) with context.

        Example:
            >>> try:
            ...     await client.send(request, stream=True)
            ... except httpx.TransportError as e:
            ...     raise ProviderNotAvailableError.from_exception(e, model=model)
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(RetortBaseError):
    """Raised when configuration is invalid or missing (e.g. no API key)."""
    pass
