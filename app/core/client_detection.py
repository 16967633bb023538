"""
Client Detection

Extracts the analytics recorded for every admitted redirect: client IP,
referrer, browser, platform and country.

Only used for analytics; nothing here blocks a request.
"""

import re
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

# Order matters: more specific patterns first (Edge, Opera before Chrome)
_BROWSER_PATTERNS = [
    (re.compile(r"edg(e|a|ios)?/[\d.]+"), "Edge"),
    (re.compile(r"(opr|opera)/[\d.]+"), "Opera"),
    (re.compile(r"(chrome|crios)/[\d.]+"), "Chrome"),
    (re.compile(r"(firefox|fxios)/[\d.]+"), "Firefox"),
    (re.compile(r"version/[\d.]+.*safari/[\d.]+"), "Safari"),
    (re.compile(r"curl/[\d.]+"), "curl"),
    (re.compile(r"wget/[\d.]+"), "Wget"),
    (re.compile(r"python-(requests|httpx|urllib)"), "Python"),
]

_PLATFORM_PATTERNS = [
    ("android", "Android"),
    ("iphone", "iOS"),
    ("ipad", "iOS"),
    ("windows", "Windows"),
    ("mac os x", "macOS"),
    ("macintosh", "macOS"),
    ("cros", "ChromeOS"),
    ("linux", "Linux"),
]

_COUNTRY_HEADERS = ("CF-IPCountry", "X-Country-Code")


@dataclass(frozen=True)
class ClickProperties:
    """Analytics captured for one admitted redirect."""
    ip: Optional[str] = None
    referrer: Optional[str] = None
    browser: Optional[str] = None
    platform: Optional[str] = None
    country: Optional[str] = None


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


def detect_browser(user_agent: Optional[str]) -> Optional[str]:
    if not user_agent:
        return None
    ua_lower = user_agent.lower()
    for pattern, name in _BROWSER_PATTERNS:
        if pattern.search(ua_lower):
            return name
    return None


def detect_platform(user_agent: Optional[str]) -> Optional[str]:
    if not user_agent:
        return None
    ua_lower = user_agent.lower()
    for needle, name in _PLATFORM_PATTERNS:
        if needle in ua_lower:
            return name
    return None


def detect_country(request: Request) -> Optional[str]:
    """Two-letter country code set by an edge proxy, if any."""
    for header in _COUNTRY_HEADERS:
        value = (request.headers.get(header) or "").strip().upper()
        # XX and T1 are Cloudflare's "unknown" and Tor markers
        if len(value) == 2 and value.isalpha() and value != "XX":
            return value
    return None


def extract_click_properties(request: Request) -> ClickProperties:
    """Collect the analytics of a redirect request."""
    user_agent = request.headers.get("User-Agent")
    ip = get_client_ip(request)
    referrer = (request.headers.get("Referer") or "").strip() or None
    return ClickProperties(
        ip=ip if ip != "unknown" else None,
        referrer=referrer[:500] if referrer else None,
        browser=detect_browser(user_agent),
        platform=detect_platform(user_agent),
        country=detect_country(request),
    )
