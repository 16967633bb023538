"""
Redirect Service

Resolves a short URL key into the redirection to perform.

Design Decisions:
- Lookup only: the per-key redirection limit is applied by the endpoint after
  the key is known to exist, so unknown keys never create limiter entries
- Raises instead of returning None so the endpoint maps the outcome to a
  404 problem response in one place
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import RedirectionNotFoundError
from app.services.url_service import URLShorteningService


@dataclass(frozen=True)
class Redirection:
    """Target and HTTP status of a redirect."""
    key: str
    target: str
    status_code: int


class RedirectService:
    """Service for handling URL redirections."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.url_service = URLShorteningService(session)

    async def redirect_to(self, key: str) -> Redirection:
        """
        Resolve a key.

        Args:
            key: Short URL key from the request path

        Returns:
            Redirection for the key

        Raises:
            InvalidInputError: If the key is blank or too long
            RedirectionNotFoundError: If the key is not known
        """
        short_url = await self.url_service.find_by_key(key)
        if short_url is None:
            raise RedirectionNotFoundError(key)
        return Redirection(
            key=short_url.url_hash,
            target=short_url.target,
            status_code=short_url.mode,
        )
