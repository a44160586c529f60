"""HTTP middleware for request correlation.

Bind a request id and the request path to the structlog context so that the
log lines emitted while evaluating a health check can be traced back to the
request that triggered them.
"""

import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from pulsecheck.core.logging_config import bind_contextvars, clear_contextvars, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request and its log entries.

    The id is taken from the incoming ``X-Request-ID`` header when an
    upstream proxy set one, otherwise a fresh UUID4 is generated. It is
    echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next):
        # Context may outlive a request on reused tasks.
        clear_contextvars()

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        # Shared through the ASGI scope with the global exception handler.
        request.state.request_id = request_id
        bind_contextvars(request_id=request_id, path=request.url.path)

        started = time.perf_counter()
        response: Response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.debug(
            "Request completed",
            method=request.method,
            status_code=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
