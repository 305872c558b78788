"""
Request ID middleware for request correlation.

- Accepts X-Request-ID from the client or generates one
- Exposes it on request.state and the response headers
- Sets the context var read by the logging filter
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lms.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to each request and log its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            response.headers[REQUEST_ID_HEADER] = request_id

            log = logger.warning if duration_ms > SLOW_REQUEST_MS else logger.debug
            log(
                "%s %s -> %s in %sms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"path": request.url.path, "duration_ms": duration_ms},
            )
            return response
        finally:
            request_id_var.reset(token)
