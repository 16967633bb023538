"""
Per-IP Rate Limiting Configuration

Protects the API endpoints (link creation, stats, QR codes) from abusive
clients. Redirects are not limited here: they are gated per short URL by
app.core.redirection_limiter instead.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Limits come from settings so deployments and tests can tune or disable them
- IP-based limiting honours X-Forwarded-For like the access log does
"""

from fastapi import Request
from slowapi import Limiter

from app.core.client_detection import get_client_ip
from app.core.setting import settings


def client_ip_key(request: Request) -> str:
    """slowapi key function: one bucket per client IP."""
    return get_client_ip(request)


limiter = Limiter(key_func=client_ip_key, enabled=settings.RATE_LIMIT_ENABLED)

# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "shorten": settings.RATE_LIMIT_SHORTEN,
    "stats": settings.RATE_LIMIT_STATS,
    "qr": settings.RATE_LIMIT_QR,
}
