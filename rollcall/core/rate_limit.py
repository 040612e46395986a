"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address

from rollcall.core.config import settings


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    # Check X-Forwarded-For header (from reverse proxies)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Uses Redis if REDIS_URL is set (Docker/production), falls back to memory for local dev
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Rate limit definitions for different endpoint categories
# Note: a whole lecture hall scans the same QR code from campus WiFi, which
# often shares one public IP via NAT, so check-in limits are generous
RATE_LIMITS = {
    "check_in": "300/minute",
    "join_class": "60/minute",
    "login": "20/minute",
    "register": "10/minute",
}
