"""
Middleware for the accounts API: correlation ids and request logging.
"""

import time
import structlog
from typing import Callable
from fastapi import FastAPI, Request, Response
from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        log = logger.bind(method=request.method, path=request.url.path)

        log.info(
            "Request started",
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception:
            log.exception(
                "Request failed",
                process_time_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        log.info(
            "Request completed",
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install request logging and correlation id handling.

    Starlette runs middleware last-added-first, so the correlation id is
    added after the logger to be set before any log line is written.
    """
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
