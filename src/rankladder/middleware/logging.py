# src/rankladder/middleware/logging.py

"""Request/response logging middleware for RankLadder API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("rankladder.api")

REQUEST_ID_HEADER = "X-Request-ID"
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome and timing.

    Ladder mutations (match reports, placements, season setup, densify) are
    logged at INFO; reads at DEBUG so a busy ladder page doesn't drown the
    audit trail. A caller-supplied X-Request-ID is reused, otherwise one is
    generated, and it is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        level = logging.INFO if request.method in MUTATING_METHODS else logging.DEBUG
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] %s %s -> ERROR (%.2fms): %s",
                request_id,
                request.method,
                request.url.path,
                (time.perf_counter() - start) * 1000,
                e,
                extra={**context, "error": str(e)},
                exc_info=True,
            )
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        # Client and server errors are always worth seeing.
        if response.status_code >= 400:
            level = logging.WARNING
        logger.log(
            level,
            "[%s] %s %s -> %d (%.2fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
