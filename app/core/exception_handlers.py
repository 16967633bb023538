"""
Exception Handlers

Translates domain exceptions into Problem Details responses (RFC 9457):
- type: URI identifying the problem type
- title: short summary of the problem type
- status: HTTP status code
- detail: explanation specific to this occurrence
- instance: path of the request that failed

Registered on the FastAPI app in app.main, next to slowapi's handler.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    DatabaseError,
    InternalError,
    InvalidInputError,
    InvalidURLError,
    RedirectionLimitExceededError,
    RedirectionNotFoundError,
)
from app.core.setting import settings

logger = logging.getLogger(__name__)

PROBLEM_CONTENT_TYPE = "application/problem+json"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def problem_response(
    request: Request,
    status_code: int,
    slug: str,
    title: str,
    detail: str,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """Build a problem-details JSON response."""
    body: Dict[str, Any] = {
        "type": f"{settings.PROBLEM_BASE_URI}/{slug}",
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
        "timestamp": _timestamp(),
    }
    if extra:
        body.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers=headers,
        media_type=PROBLEM_CONTENT_TYPE,
    )


async def invalid_url_handler(request: Request, exc: InvalidURLError) -> JSONResponse:
    return problem_response(
        request, status.HTTP_400_BAD_REQUEST, "invalid-url", "Invalid URL", str(exc)
    )


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return problem_response(
        request, status.HTTP_400_BAD_REQUEST, "invalid-input", "Invalid Input", str(exc)
    )


async def redirection_not_found_handler(request: Request, exc: RedirectionNotFoundError) -> JSONResponse:
    return problem_response(
        request, status.HTTP_404_NOT_FOUND, "redirection-not-found", "Redirection Not Found", str(exc)
    )


async def redirection_limit_handler(request: Request, exc: RedirectionLimitExceededError) -> JSONResponse:
    """
    429 response echoing the limiter diagnostics for the denied key.

    Retry-After tells the client how many seconds remain in the window, as
    measured by the limiter's clock when the redirect was denied.
    """
    reset_at_iso = None
    if exc.reset_at is not None:
        reset_at_iso = datetime.fromtimestamp(exc.reset_at, timezone.utc).isoformat()
    headers = None
    if exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}

    return problem_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "redirection-limit-exceeded",
        "Redirection Limit Exceeded",
        "Maximum number of redirections exceeded for this URL",
        extra={
            "key": exc.key,
            "url": f"{settings.BASE_URL}/{exc.key}",
            "limits": {
                "maxRedirects": exc.max_redirects,
                "currentRedirects": exc.current_redirects,
                "windowSeconds": exc.window_seconds,
                "resetAt": reset_at_iso,
                "errorType": "LIMIT_EXCEEDED",
            },
        },
        headers=headers,
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = f"ERR-{uuid.uuid4().hex[:12]}"
    logger.error(
        f"Internal error {error_id} on {request.method} {request.url.path}: {exc}",
        exc_info=exc
    )
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal-error",
        "Internal Server Error",
        "An internal server error occurred",
        extra={"errorId": error_id},
    )


def add_exception_handlers(app: FastAPI) -> None:
    """
    Register all domain exception handlers on the app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(InvalidURLError, invalid_url_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(RedirectionNotFoundError, redirection_not_found_handler)
    app.add_exception_handler(RedirectionLimitExceededError, redirection_limit_handler)
    app.add_exception_handler(DatabaseError, internal_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
