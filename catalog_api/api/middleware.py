"""Request correlation for the catalog API.

Unhandled exceptions are turned into error bodies by the exception
handlers in ``catalog_api.main``; this module only tags requests.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# Polled by the orchestrator; not worth a log line each.
QUIET_PATHS = frozenset({"/health", "/ready"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id.

    The id comes from ``X-Request-ID`` when the caller sends a usable one
    and is generated otherwise. It is stored on ``request.state`` for
    error bodies, bound to the structlog context together with the
    method and path, and echoed on the response.
    """

    HEADER_NAME = "X-Request-ID"
    MAX_LENGTH = 128

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = self.request_id_for(request)
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            if request.url.path not in QUIET_PATHS:
                logger.info(
                    "Catalog request",
                    status_code=status_code,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
            structlog.contextvars.clear_contextvars()

        response.headers[self.HEADER_NAME] = request_id
        return response

    def request_id_for(self, request: Request) -> str:
        """Get the caller's request id, or a fresh one if it is missing or oversized."""
        supplied = request.headers.get(self.HEADER_NAME, "").strip()
        if supplied and len(supplied) <= self.MAX_LENGTH:
            return supplied
        return uuid4().hex


def setup_middleware(app: FastAPI) -> None:
    """Add the catalog middleware to the application."""
    app.add_middleware(RequestIdMiddleware)
