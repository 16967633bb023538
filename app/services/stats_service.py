"""
Statistics Service

Aggregates the stored mapping and the click log of a short URL.

Design Decisions:
- Click counts are computed from the clicks table, no denormalized counter
- Redirect-limiter counters are not part of the stats: they are transient
  and process-local
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RedirectionNotFoundError
from app.services.url_service import URLShorteningService
from app.services.visit_logger import ClickLoggerService


class StatsService:
    """Service for retrieving URL statistics."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.url_service = URLShorteningService(session)
        self.click_logger = ClickLoggerService(session)

    async def get_stats(self, key: Optional[str]) -> dict:
        """
        Get statistics for a short URL.

        Returns:
            Dictionary with key, original_url, created_at (ISO), click_count,
            safe and sponsor

        Raises:
            InvalidInputError: If the key is blank or too long
            RedirectionNotFoundError: If the key is not known
        """
        short_url = await self.url_service.find_by_key(key)
        if short_url is None:
            raise RedirectionNotFoundError(key)

        click_count = await self.click_logger.count_clicks(short_url.url_hash)

        return {
            "key": short_url.url_hash,
            "original_url": short_url.target,
            "created_at": short_url.created_at.isoformat(),
            "click_count": click_count,
            "safe": short_url.is_safe,
            "sponsor": short_url.sponsor,
        }
