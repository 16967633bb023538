"""
Custom Exceptions

Domain exceptions raised by the services and translated into problem-details
HTTP responses by app.core.exception_handlers.

The redirection limiter itself never raises: the redirect endpoint turns a
denial into RedirectionLimitExceededError so the 429 payload is built in one
place.
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidInputError(URLShortenerException):
    """Raised when an input field is missing, blank or too long."""

    def __init__(self, field: str, value: Optional[str]):
        self.field = field
        self.value = value
        shown = "null" if value is None else value
        super().__init__(f"Invalid input for field '{field}': {shown}")


class RedirectionNotFoundError(URLShortenerException):
    """Raised when a short URL key is not known."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Short URL '{key}' is not known")


class RedirectionLimitExceededError(URLShortenerException):
    """Raised by the redirect endpoint when the limiter denies a redirect."""

    def __init__(
        self,
        key: str,
        max_redirects: int,
        current_redirects: int,
        window_seconds: int,
        reset_at: Optional[int],
        retry_after: Optional[int] = None
    ):
        self.key = key
        self.max_redirects = max_redirects
        self.current_redirects = current_redirects
        self.window_seconds = window_seconds
        self.reset_at = reset_at
        self.retry_after = retry_after
        super().__init__(
            f"Maximum number of redirections ({max_redirects} per {window_seconds}s) "
            f"exceeded for '{key}'"
        )


class DatabaseError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class InternalError(URLShortenerException):
    """Raised when a collaborator fails unexpectedly."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message)
