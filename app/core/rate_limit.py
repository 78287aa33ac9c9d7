from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

API_SCOPE = "api"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().rate_limit_enabled,
    headers_enabled=True,
)


def _current_limit() -> str:
    return get_settings().rate_limit


def rate_limit():
    """Per-client-IP limit shared by every API route.

    Decorated endpoints must accept ``request: Request`` and, when they return
    a plain dict, ``response: Response`` so the limit headers can be attached.
    """
    return limiter.shared_limit(_current_limit, scope=API_SCOPE)
