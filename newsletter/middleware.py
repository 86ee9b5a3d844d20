"""FastAPI middleware for cross-cutting concerns."""

import logging
import time
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from newsletter.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that attaches a request ID to every request.

    - Reads ``X-Request-ID`` from incoming headers (if present).
    - Generates a new UUID v4 when the header is absent.
    - Stores the ID in a ``ContextVar`` so every log statement made while
      handling the request carries it.
    - Logs the start and end of the request with its latency.
    - Echoes the request ID back in the response headers.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        started = time.perf_counter()

        try:
            logger.info(
                "Request started",
                extra={"http_method": request.method, "http_route": request.url.path},
            )
            response = await call_next(request)
            logger.info(
                "Request finished",
                extra={
                    "http_method": request.method,
                    "http_route": request.url.path,
                    "http_status_code": response.status_code,
                    "elapsed_milliseconds": round(
                        (time.perf_counter() - started) * 1000, 2
                    ),
                },
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
