"""
Click Logging Service

Records one Click row per admitted redirect for analytics.

Design Decisions:
- Called from a background task so the redirect response is not delayed
- Denied redirects (429) never reach this service
- Can be replaced with queue-based logging without touching the endpoints
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.client_detection import ClickProperties
from app.db.models import Click


class ClickLoggerService:
    """Service for logging and counting clicks."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_click(self, key: str, properties: ClickProperties) -> Click:
        """
        Store a click on a short URL.

        Args:
            key: The short URL key that was followed
            properties: Analytics extracted from the request

        Returns:
            The persisted Click
        """
        click = Click(
            url_hash=key,
            ip=properties.ip,
            referrer=properties.referrer,
            browser=properties.browser,
            platform=properties.platform,
            country=properties.country,
        )
        self.session.add(click)
        await self.session.commit()
        return click

    async def count_clicks(self, key: str) -> int:
        """Number of recorded clicks for a key."""
        statement = select(func.count()).select_from(Click).where(Click.url_hash == key)
        result = await self.session.execute(statement)
        return result.scalar_one()
