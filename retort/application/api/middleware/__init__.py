"""
HTTP middleware.

- ErrorHandlingMiddleware: catch-all 500 for unexpected exceptions
- RequestIdMiddleware: X-Request-ID assignment and log correlation
"""

from .error_handler import ErrorHandlingMiddleware
from .request_id import RequestIdMiddleware

__all__ = ["ErrorHandlingMiddleware", "RequestIdMiddleware"]
