"""
Rate Limiting Middleware
========================

Rate limiting setup using slowapi.

Only the credential endpoints (/register and /login) are limited, to slow
down password guessing.

The limiter object is shared by the route decorators, but the limit and the
on/off switch come from the settings of the app serving the request.
``bind_rate_limit_settings`` exposes those settings for the duration of the
request; it must be a dependency of every rate-limited route.
"""

from contextvars import ContextVar

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config import Settings


# Create limiter instance with IP-based rate limiting
limiter = Limiter(key_func=get_remote_address)

_request_settings: ContextVar[Settings] = ContextVar("rate_limit_settings")


async def bind_rate_limit_settings(request: Request) -> None:
    """Make the serving app's settings visible to the limit callables below."""
    _request_settings.set(request.app.state.settings)


def auth_rate_limit() -> str:
    """Limit string for the credential endpoints of the current app."""
    return _request_settings.get().auth_rate_limit


def rate_limit_disabled() -> bool:
    return not _request_settings.get().rate_limit_enabled


def setup_rate_limiting(app: FastAPI) -> None:
    """
    Set up rate limiting for the FastAPI application.

    Attaches the limiter to the app state and registers
    the exception handler for rate limit exceeded errors.

    Args:
        app: The FastAPI application instance. Its limits are read per
            request from ``app.state.settings``.

    Usage in routes:
        from api.middleware.rate_limiter import (
            auth_rate_limit, bind_rate_limit_settings, limiter, rate_limit_disabled
        )

        router = APIRouter(dependencies=[Depends(bind_rate_limit_settings)])

        @router.post("/login")
        @limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
        async def login(request: Request, ...):
            ...
    """
    # Attach limiter to app state for access in routes
    app.state.limiter = limiter

    # Register exception handler for rate limit exceeded
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
