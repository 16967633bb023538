"""
Background Task Helpers

Background tasks run after the response is sent, when the endpoint's session
is already closed, so each helper opens its own session.
"""

import logging

from app.core.client_detection import ClickProperties
from app.db.session import async_session_maker
from app.services.visit_logger import ClickLoggerService

logger = logging.getLogger(__name__)


async def log_click_background(key: str, properties: ClickProperties) -> None:
    """
    Background task to record a click.

    Failures are logged and swallowed: analytics must never break redirects.

    Args:
        key: The short URL key that was followed
        properties: Analytics extracted from the request
    """
    try:
        async with async_session_maker() as session:
            await ClickLoggerService(session).log_click(key, properties)
    except Exception as e:
        logger.error(f"Failed to log click for {key}: {e}", exc_info=True)
