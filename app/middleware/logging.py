"""
Logging Middleware for Request/Response Logging

Writes one access line per HTTP request:
    METHOD PATH STATUS_CODE PROCESS_TIME_MS IP:client

Design Decisions:
- Uses Starlette's BaseHTTPMiddleware for compatibility
- Dedicated "url_shortener.access" logger so access lines can be routed
  separately from application logs
- Client IP resolved like the click analytics (X-Forwarded-For first)
"""

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.client_detection import get_client_ip

logger = logging.getLogger("url_shortener.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        client_ip = get_client_ip(request)
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip}"
        )

        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response


def add_logging_middleware(app: FastAPI) -> None:
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
