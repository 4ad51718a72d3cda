"""Rate limiting middleware using SlowAPI."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import get_settings

settings = get_settings()


def get_user_or_ip(request: Request) -> str:
    """
    Get rate limit key from the session user or IP address.

    Uses the user id if authenticated, falls back to IP address.
    """
    # Set by the session dependency in src.auth.security
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.id}"

    return f"ip:{get_remote_address(request)}"


# In-memory by default, Redis when rate_limit_storage_uri points at one
limiter = Limiter(
    key_func=get_user_or_ip,
    storage_uri=settings.rate_limit_storage_uri,
    strategy="fixed-window",
)


def rate_limit_ai():
    """Rate limit for the generative-AI proxy endpoints."""
    return limiter.limit(settings.ai_rate_limit, key_func=get_user_or_ip)
