"""
URL Reachability Service

Probes a target URL with an HTTP HEAD request before it is shortened, so
links to dead hosts are rejected at creation time.

Design Decisions:
- 2xx and 3xx answers count as reachable (redirecting sites are common)
- Redirects are not followed: the first answer decides
- Never raises for network problems; the outcome is reported in the result
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"


@dataclass
class ReachabilityResult:
    """Outcome of one reachability probe."""
    reachable: bool
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    error_type: Optional[str] = None
    content_type: Optional[str] = None
    validated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def classify_status(status_code: int) -> Optional[str]:
    """
    Map an HTTP status to an error category.

    Returns:
        None for reachable (2xx/3xx) answers, the category otherwise
    """
    if 200 <= status_code < 400:
        return None
    if 400 <= status_code < 500:
        return "Client Error"
    if 500 <= status_code < 600:
        return "Server Error"
    return "Other Error"


class URLReachabilityChecker:
    """
    HEAD-request based reachability checker.

    A custom httpx transport can be injected for tests.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout
        self.transport = transport

    async def check(self, url: str) -> ReachabilityResult:
        """
        Probe a URL.

        Args:
            url: Absolute http(s) URL

        Returns:
            ReachabilityResult describing the answer or the failure
        """
        start = time.perf_counter()

        def elapsed() -> int:
            return int((time.perf_counter() - start) * 1000)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=False
            ) as client:
                response = await client.head(url)
        except httpx.TimeoutException:
            logger.info(f"Reachability probe timed out for {url}")
            return ReachabilityResult(
                reachable=False, response_time_ms=elapsed(), error_type=TIMEOUT
            )
        except httpx.HTTPError as e:
            logger.info(f"Reachability probe failed for {url}: {e}")
            return ReachabilityResult(
                reachable=False, response_time_ms=elapsed(), error_type=NETWORK_ERROR
            )

        error_type = classify_status(response.status_code)
        return ReachabilityResult(
            reachable=error_type is None,
            status_code=response.status_code,
            response_time_ms=elapsed(),
            error_type=error_type,
            content_type=response.headers.get("content-type"),
        )
