"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request


def get_ip_address(request: Request) -> str:
    """
    Get the client address for rate limiting.
    Honors the first X-Forwarded-For hop when running behind a proxy.
    """
    forwarded_for = request.headers.get("x-forwarded-for", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return get_remote_address(request)


# Sign-in and registration are the only unauthenticated write endpoints
limiter = Limiter(
    key_func=get_ip_address,
    default_limits=["200/minute"],
)
