"""
LLM Provider Exceptions

All exceptions related to calls against the chat-completion provider.
"""

from retort.core.exceptions.base import RetortBaseError


class ProviderError(RetortBaseError):
    """Base exception for completion provider errors."""
    pass


class ProviderNotAvailableError(ProviderError):
    """
    Raised when the provider cannot be reached.

    Common causes:
    - DNS or connection failure
    - Connection reset mid-stream
    - Transport timeout
    """
    pass

