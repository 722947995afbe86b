"""
Request rate limiting (slowapi).

Endpoints that call the language model are limited to 10/minute per client;
everything else shares the 60/minute default. Decorated endpoints must take
a `request: Request` parameter.
"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from wagerdesk.core.config import settings


def get_rate_limit_key(request: Request) -> str:
    """
    Get the rate limit key for a request.

    Uses IP address, with fallback to X-Forwarded-For for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["60/minute"],
    storage_uri=settings.REDIS_URL if settings.RATE_LIMIT_STORAGE == "redis" else "memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)


def rate_limit_ai(endpoint_func):
    """10/minute for endpoints backed by the chat-completion API."""
    return limiter.limit("10/minute")(endpoint_func)
