"""Request ID Middleware.

Gives every request a request ID that is:
- Taken from the incoming X-Request-ID header, or generated
- Bound to the logging context for the duration of the request
- Returned in the response headers

Usage:
    from fastapi import FastAPI
    from middleware.request_context import RequestContextMiddleware

    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import Token
from typing import Any, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from services.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> Optional[str]:
    """Get the request ID bound to the current context, or None."""
    return request_id_var.get()


class request_id_context:
    """Context manager binding a request ID outside of HTTP handling.

    Usage:
        with request_id_context() as rid:
            calculator.calculate_tax_amount(...)
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or str(uuid.uuid4())
        self._token: Optional[Token[Optional[str]]] = None

    def __enter__(self) -> str:
        self._token = request_id_var.set(self.request_id)
        return self.request_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            request_id_var.reset(self._token)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to each request and log its completion."""

    def __init__(
        self,
        app,
        header_name: str = REQUEST_ID_HEADER,
        generator: Optional[Callable[[], str]] = None,
    ):
        super().__init__(app)
        self.header_name = header_name
        self.generator = generator or (lambda: str(uuid.uuid4()))

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        request_id = request.headers.get(self.header_name) or self.generator()
        token = request_id_var.set(request_id)
        start = time.perf_counter()

        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[self.header_name] = request_id

            logger.info(
                "%s %s -> %d",
                request.method,
                request.url.path,
                response.status_code,
                extra={'extra_data': {
                    'duration_ms': round((time.perf_counter() - start) * 1000, 3),
                }},
            )
            return response
        finally:
            request_id_var.reset(token)
