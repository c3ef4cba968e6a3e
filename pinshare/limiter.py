"""Rate limiter for auth endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from pinshare.config import Settings

DEFAULT_AUTH_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)

# Set from the app's Settings by configure_limiter; read on every limited request
_auth_limit = DEFAULT_AUTH_RATE_LIMIT


def configure_limiter(settings: Settings) -> Limiter:
    """Apply the app's rate-limit settings to the shared limiter."""
    global _auth_limit
    limiter.enabled = settings.rate_limit_enabled
    _auth_limit = settings.auth_rate_limit
    return limiter


def auth_rate_limit() -> str:
    """Limit string for signup/login."""
    return _auth_limit
