"""
FastAPI Dependencies

Provide the shared collaborators of the endpoints. Everything is resolved per
request so tests can swap any of them through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Request

from app.core.redirection_limiter import RedirectionLimiter
from app.core.setting import settings
from app.services.qr_service import QRCodeService
from app.services.reachability import URLReachabilityChecker
from app.services.safe_browsing import SafeBrowsingService


def get_redirection_limiter(request: Request) -> RedirectionLimiter:
    """The limiter built at startup and stored on app.state."""
    return request.app.state.redirection_limiter


def get_reachability_checker() -> Optional[URLReachabilityChecker]:
    if not settings.REACHABILITY_CHECK_ENABLED:
        return None
    return URLReachabilityChecker(timeout=settings.REACHABILITY_TIMEOUT_SECONDS)


def get_safe_browsing_service() -> Optional[SafeBrowsingService]:
    if not settings.SAFE_BROWSING_API_KEY:
        return None
    return SafeBrowsingService(
        api_key=settings.SAFE_BROWSING_API_KEY,
        api_url=settings.SAFE_BROWSING_URL,
    )


def get_qr_service() -> QRCodeService:
    return QRCodeService()
