"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Length limits prevent oversized rows and log lines
- Only http/https targets can be shortened
- Keys are checked before they reach the database or the limiter
"""

from typing import Optional
from urllib.parse import urlparse

from app.core.exceptions import InvalidInputError

ALLOWED_SCHEMES = {"http", "https"}
MALICIOUS_PATTERNS = ("javascript:", "data:", "file:", "vbscript:")


def sanitize_input(value: Optional[str], field: str, max_length: int = 2048) -> str:
    """
    Check basic input constraints and strip surrounding whitespace.

    Args:
        value: Raw input (None when the field was not sent)
        field: Field name used in the error message
        max_length: Maximum accepted length

    Returns:
        The stripped value

    Raises:
        InvalidInputError: If the value is missing, blank or too long
    """
    if value is None:
        raise InvalidInputError(field, None)
    if not value.strip():
        raise InvalidInputError(field, value)
    if len(value) > max_length:
        raise InvalidInputError(field, f"length {len(value)} exceeds maximum {max_length}")
    return value.strip()


def sanitize_key(key: Optional[str], max_length: int = 100) -> str:
    """Validate a short URL key taken from the request path."""
    return sanitize_input(key, "key", max_length)


def is_valid_url(url: str) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has valid domain, and doesn't contain
    malicious patterns. Prevents javascript:, file:, and other dangerous schemes.

    Args:
        url: The URL string to validate

    Returns:
        True if valid and safe, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if any(ord(char) < 32 or char == " " for char in url):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if not result.scheme or not result.netloc:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    domain = result.hostname or ""
    if domain != "localhost" and "." not in domain:
        return False

    url_lower = url.lower()
    if any(pattern in url_lower for pattern in MALICIOUS_PATTERNS):
        return False

    return True
