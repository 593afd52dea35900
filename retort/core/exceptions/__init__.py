"""
Exception Module

Structured exception hierarchy for the retort streaming service.

Module Structure:
-----------------
- **base.py**: RetortBaseError base class + ConfigurationError
- **provider.py**: Completion provider exceptions
- **streaming.py**: Frame stream exceptions
- **validation.py**: Request validation exceptions

Usage:
------
```python
from retort.core.exceptions import InvalidInputError, ProviderNotAvailableError
```
"""

from retort.core.exceptions.base import ConfigurationError, RetortBaseError
from retort.core.exceptions.provider import (
    ProviderError,
    ProviderNotAvailableError,
)
from retort.core.exceptions.streaming import FrameDecodeError, StreamingError
from retort.core.exceptions.validation import InvalidInputError, ValidationError

__all__ = [
    # Base
    "RetortBaseError",
    "ConfigurationError",
    # Provider
    "ProviderError",
    "ProviderNotAvailableError",
    # Streaming
    "StreamingError",
    "FrameDecodeError",
    # Validation
    "ValidationError",
    "InvalidInputError",
]
