"""
FastAPI Endpoints for URL Shortener Service

This module defines the REST API endpoints with minimal logic.
Endpoints only handle:
- Reading form fields and path parameters
- Per-IP rate limiting (slowapi) of the API endpoints
- Per-key redirection limiting of the redirect endpoint
- Delegating to the service layer

Domain errors propagate as exceptions and are rendered as problem-details
responses by app.core.exception_handlers.

Route order matters: /stats/{key} and /{key}/qr are declared before the
catch-all /{key}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_qr_service,
    get_reachability_checker,
    get_redirection_limiter,
    get_safe_browsing_service,
)
from app.api.schemas import LinkProperties, ShortenResponse, StatsResponse
from app.core.client_detection import detect_country, extract_click_properties, get_client_ip
from app.core.exceptions import RedirectionLimitExceededError, RedirectionNotFoundError
from app.core.rate_limit import RATE_LIMITS, limiter
from app.core.redirection_limiter import RedirectionLimiter
from app.core.setting import settings
from app.db.session import get_session
from app.services.background_tasks import log_click_background
from app.services.qr_service import SVG_MEDIA_TYPE, QRCodeService
from app.services.reachability import URLReachabilityChecker
from app.services.redirect_service import RedirectService
from app.services.safe_browsing import SafeBrowsingService
from app.services.stats_service import StatsService
from app.services.url_service import ShortURLProperties, URLShorteningService

logger = logging.getLogger(__name__)

router = APIRouter()


def short_link(key: str) -> str:
    return f"{settings.BASE_URL}/{key}"


@router.post(
    "/api/link",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL (form field 'url') and returns its short link"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    response: Response,
    url: Optional[str] = Form(None),
    sponsor: Optional[str] = Form(None),
    session: AsyncSession = Depends(get_session),
    reachability_checker: Optional[URLReachabilityChecker] = Depends(get_reachability_checker),
    safe_browsing: Optional[SafeBrowsingService] = Depends(get_safe_browsing_service),
) -> ShortenResponse:
    """
    Create a new short URL from a long URL.

    Returns:
        ShortenResponse with the short link and its safety; the link is also
        sent in the Location header

    Raises:
        InvalidInputError: 400 when url is missing, blank or too long
        InvalidURLError: 400 when url is malformed or unreachable
    """
    url_service = URLShorteningService(
        session,
        reachability_checker=reachability_checker,
        safe_browsing=safe_browsing,
    )
    ip = get_client_ip(request)
    short_url = await url_service.create_short_url(
        url,
        ShortURLProperties(
            ip=ip if ip != "unknown" else None,
            sponsor=sponsor or None,
            country=detect_country(request),
        ),
    )

    link = short_link(short_url.url_hash)
    response.headers["Location"] = link
    return ShortenResponse(url=link, properties=LinkProperties(safe=short_url.is_safe))


@router.get(
    "/stats/{key}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns the target, creation date and click count of a short URL"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    key: str,
    request: Request,  # Required for rate limiting
    session: AsyncSession = Depends(get_session)
) -> StatsResponse:
    stats = await StatsService(session).get_stats(key)
    return StatsResponse(**stats)


@router.get(
    "/{key}/qr",
    response_class=Response,
    summary="QR code of a short URL",
    description="Returns an SVG QR code encoding the short link"
)
@limiter.limit(RATE_LIMITS["qr"])
async def get_qr_code(
    key: str,
    request: Request,  # Required for rate limiting
    session: AsyncSession = Depends(get_session),
    qr_service: QRCodeService = Depends(get_qr_service),
) -> Response:
    """
    Raises:
        RedirectionNotFoundError: 404 when the key is not known
    """
    short_url = await URLShorteningService(session).find_by_key(key)
    if short_url is None:
        raise RedirectionNotFoundError(key)

    svg = qr_service.generate_svg(short_link(short_url.url_hash))
    return Response(content=svg, media_type=SVG_MEDIA_TYPE)


@router.get(
    "/{key}",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Redirect to original URL",
    description="Redirects to the target of a short URL, at most "
                f"{settings.REDIRECT_MAX_REDIRECTS} times per "
                f"{settings.REDIRECT_WINDOW_SECONDS}s window per key"
)
async def redirect_to_url(
    key: str,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    redirection_limiter: RedirectionLimiter = Depends(get_redirection_limiter),
) -> RedirectResponse:
    """
    Redirect to the target URL of a short URL.

    The key is resolved first, so unknown keys answer 404 without touching
    the limiter. Only admitted redirects are recorded as clicks.

    Args:
        key: The short URL key
        request: FastAPI Request object (for click analytics)
        background_tasks: FastAPI BackgroundTasks for async click logging

    Returns:
        RedirectResponse with the status stored for the short URL (307 or 301)

    Raises:
        InvalidInputError: 400 when the key is blank or too long
        RedirectionNotFoundError: 404 when the key is not known
        RedirectionLimitExceededError: 429 when the window of the key is exhausted
    """
    redirection = await RedirectService(session).redirect_to(key)

    if not redirection_limiter.is_allowed(redirection.key):
        current = redirection_limiter.current_redirects(redirection.key)
        logger.warning(
            f"Redirect limit reached for {redirection.key} "
            f"({current}/{redirection_limiter.max_redirects})"
        )
        raise RedirectionLimitExceededError(
            key=redirection.key,
            max_redirects=redirection_limiter.max_redirects,
            current_redirects=current,
            window_seconds=redirection_limiter.window_seconds,
            reset_at=redirection_limiter.reset_at(redirection.key),
            retry_after=redirection_limiter.seconds_until_reset(redirection.key),
        )

    background_tasks.add_task(
        log_click_background,
        key=redirection.key,
        properties=extract_click_properties(request),
    )

    logger.info(f"Redirecting {redirection.key} -> {redirection.target}")
    return RedirectResponse(url=redirection.target, status_code=redirection.status_code)
