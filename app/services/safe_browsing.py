"""
Safe Browsing Service

Asks the Google Safe Browsing v4 Lookup API whether a URL is known to host
malware or phishing.

The verdict is informational: it is stored with the short URL and returned
as properties.safe, but unsafe links are not refused.
"""

import logging
from typing import Optional

import httpx

from app.db.models import UrlSafety

logger = logging.getLogger(__name__)

CLIENT_ID = "url-shortener"
CLIENT_VERSION = "1.0.0"
THREAT_TYPES = ["MALWARE", "SOCIAL_ENGINEERING"]
PLATFORM_TYPES = ["WINDOWS", "LINUX"]


def build_threat_request(url: str) -> dict:
    """Body of a threatMatches:find request for one URL."""
    return {
        "client": {"clientId": CLIENT_ID, "clientVersion": CLIENT_VERSION},
        "threatInfo": {
            "threatTypes": THREAT_TYPES,
            "platformTypes": PLATFORM_TYPES,
            "threatEntryTypes": ["URL"],
            "threatEntries": [{"url": url}],
        },
    }


class SafeBrowsingService:
    """Client for the Safe Browsing threat matching endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://safebrowsing.googleapis.com/v4/threatMatches:find",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def check(self, url: str) -> UrlSafety:
        """
        Look a URL up.

        Args:
            url: URL to check

        Returns:
            SAFE when no threat matches, UNSAFE when some match, UNKNOWN when
            no API key is configured or the lookup failed
        """
        if not self.enabled:
            return UrlSafety.UNKNOWN

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=build_threat_request(url),
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Safe Browsing lookup failed for {url}: {e}")
            return UrlSafety.UNKNOWN

        if payload.get("matches"):
            logger.warning(f"Safe Browsing flagged {url}")
            return UrlSafety.UNSAFE
        return UrlSafety.SAFE
