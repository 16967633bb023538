"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Sanitizing and validating the submitted URL
- Checking reachability and Safe Browsing status
- Deriving the short key from the URL hash
- Persisting the mapping

Design Decisions:
- Hash-based keys: the first 8 hex characters of the MD5 digest of the URL.
  The same URL always yields the same key, so shortening is idempotent and
  needs no counter or pre-generated code pool
- Validation runs before the reachability probe so malformed input never
  triggers network traffic
- A different URL mapping to an existing key is reported as a database error
  instead of silently redirecting to the wrong target
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError, InvalidURLError
from app.core.setting import settings
from app.core.validators import is_valid_url, sanitize_input, sanitize_key
from app.db.models import TEMPORARY_REDIRECT, ShortURL, UrlSafety
from app.services.reachability import URLReachabilityChecker
from app.services.safe_browsing import SafeBrowsingService

logger = logging.getLogger(__name__)

HASH_LENGTH = 8


def hash_url(url: str, length: int = HASH_LENGTH) -> str:
    """
    Derive the short key of a URL.

    Args:
        url: The URL to hash
        length: Number of hex characters kept

    Returns:
        Lowercase hex prefix of the MD5 digest
    """
    return hashlib.md5(url.encode("utf-8")).hexdigest()[:length]


@dataclass
class ShortURLProperties:
    """Optional metadata recorded with a new short URL."""
    ip: Optional[str] = None
    sponsor: Optional[str] = None
    owner: Optional[str] = None
    country: Optional[str] = None
    mode: int = TEMPORARY_REDIRECT


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Network collaborators are optional: without a reachability checker URLs
    are not probed, without a Safe Browsing service safety stays 'unknown'.
    """

    def __init__(
        self,
        session: AsyncSession,
        reachability_checker: Optional[URLReachabilityChecker] = None,
        safe_browsing: Optional[SafeBrowsingService] = None
    ):
        """
        Initialize the URL shortening service.

        Args:
            session: Database session
            reachability_checker: Probe run before a URL is accepted
            safe_browsing: Threat lookup used to fill ShortURL.safety
        """
        self.session = session
        self.reachability_checker = reachability_checker
        self.safe_browsing = safe_browsing

    async def get_short_url(self, key: str) -> Optional[ShortURL]:
        """
        Retrieve a short URL by its key.

        Args:
            key: The short URL key

        Returns:
            ShortURL object if found, None otherwise
        """
        statement = select(ShortURL).where(ShortURL.url_hash == key)
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def create_short_url(
        self,
        url: Optional[str],
        properties: Optional[ShortURLProperties] = None
    ) -> ShortURL:
        """
        Create a short URL, or return the existing one for the same URL.

        Args:
            url: The long URL to shorten
            properties: Creator metadata

        Returns:
            Persisted ShortURL

        Raises:
            InvalidInputError: If the URL is missing, blank or too long
            InvalidURLError: If the URL is malformed or unreachable
            DatabaseError: On key collision or database failure
        """
        properties = properties or ShortURLProperties()
        target = sanitize_input(url, "url", settings.MAX_URL_LENGTH)

        if not is_valid_url(target):
            raise InvalidURLError(
                target,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid domain"
            )

        if self.reachability_checker is not None:
            result = await self.reachability_checker.check(target)
            if not result.reachable:
                logger.info(f"Rejected unreachable URL {target}: {result.error_type}")
                raise InvalidURLError(target, reason="URL is not reachable")

        key = hash_url(target)
        existing = await self.get_short_url(key)
        if existing is not None:
            return self._ensure_same_target(existing, target)

        safety = UrlSafety.UNKNOWN
        if self.safe_browsing is not None:
            safety = await self.safe_browsing.check(target)

        short_url = ShortURL(
            url_hash=key,
            target=target,
            mode=properties.mode,
            owner=properties.owner,
            sponsor=properties.sponsor,
            safety=safety.value,
            ip=properties.ip,
            country=properties.country,
        )

        try:
            self.session.add(short_url)
            await self.session.commit()
            await self.session.refresh(short_url)
        except IntegrityError as e:
            # Concurrent creation of the same URL
            await self.session.rollback()
            existing = await self.get_short_url(key)
            if existing is not None:
                return self._ensure_same_target(existing, target)
            raise DatabaseError(
                "Failed to create short URL: database constraint violation",
                original_error=e
            )
        except Exception as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to create short URL: {e}", original_error=e)

        logger.info(f"Created short URL {key} -> {target} (safety={safety.value})")
        return short_url

    async def find_by_key(self, key: Optional[str]) -> Optional[ShortURL]:
        """Sanitize a key from the request path and look it up."""
        return await self.get_short_url(sanitize_key(key, settings.MAX_KEY_LENGTH))

    @staticmethod
    def _ensure_same_target(existing: ShortURL, target: str) -> ShortURL:
        if existing.target != target:
            raise DatabaseError(
                f"Hash collision: key {existing.url_hash} already maps to another URL"
            )
        return existing
