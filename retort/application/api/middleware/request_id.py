"""
Request ID Middleware

Assigns every request an ID (inbound ``X-Request-ID`` or a new UUID), binds it
to the logging context, exposes it as ``request.state.request_id`` and echoes
it on the response.
"""

import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from retort.core.config.constants import HEADER_REQUEST_ID
from retort.core.logging.logger import clear_request_id, set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()
