"""
coach_gateway.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata into structlog contextvars.
- Turn unhandled exceptions into responses while that context is still bound.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Ensures every request has a request id, echoed on every response
    - Binds request-scoped contextvars for structured logs
    - Hands unhandled exceptions to `on_error` before the context is cleared
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        on_error: Callable[[Exception], Response] | None = None,
    ) -> None:
        super().__init__(app)
        self._on_error = on_error

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        try:
            response: Response = await call_next(request)
        except Exception as e:
            if self._on_error is None:
                raise
            response = self._on_error(e)
        finally:
            # Avoid leaking context (including user_id) across requests.
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
