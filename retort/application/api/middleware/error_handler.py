"""
Error Handling Middleware

Last line of defense for exceptions that escape route handlers and the
application's exception handlers. Domain errors (RetortBaseError) are mapped
by exception handlers in ``retort.application.app``; this middleware only
sees the unexpected ones.

Failures after a streaming response has started never reach this layer: the
orchestrator turns them into a terminal ``error`` frame.
"""

import traceback
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from retort.core.config.constants import MSG_SERVICE_UNAVAILABLE
from retort.core.logging.logger import get_logger

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Catch-all for unhandled exceptions.

    Responds with ``500 {"error": <generic message>}``; the exception type,
    message and traceback are added only when ``include_traceback`` is set
    (development).
    """

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            error_response = {"error": MSG_SERVICE_UNAVAILABLE}
            if self.include_traceback:
                error_response["error_type"] = error_type
                error_response["detail"] = str(e)
                error_response["traceback"] = traceback.format_exc()

            return JSONResponse(status_code=500, content=error_response)
