"""
Streaming Exceptions

Exceptions raised while producing the newline-delimited frame stream.
"""

from retort.core.exceptions.base import RetortBaseError


class StreamingError(RetortBaseError):
    """Base exception for streaming errors."""
    pass


class FrameDecodeError(StreamingError):
    """Raised when a protocol line cannot be decoded into a frame."""
    pass
