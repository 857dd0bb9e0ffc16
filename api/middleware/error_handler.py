"""
Global Error Handler Middleware
================================

Maps custom exceptions to HTTP status codes and formats error responses.

Every handled failure is returned as ``{"error_type", "message", "details"}``.
Storage failures and unexpected exceptions never leak internals unless
``api_debug`` is enabled.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from config import Settings
from exceptions import (
    AuthError,
    DuplicateUsernameError,
    StorageError,
    TaskNotFoundError,
    TaskTrackError,
)

# Set up module logger
logger = logging.getLogger(__name__)


# Map exceptions to HTTP status codes (subclasses inherit their parent's code)
EXCEPTION_STATUS_MAP = {
    AuthError: status.HTTP_401_UNAUTHORIZED,
    TaskNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateUsernameError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: TaskTrackError) -> int:
    """Find the status code for an exception, walking up its class hierarchy."""
    for cls in type(error).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_error_handler_middleware(settings: Settings):
    """
    Build the global error handling middleware.

    Args:
        settings: Application settings (``api_debug`` controls detail exposure)

    Returns:
        An ``http`` middleware function for ``app.middleware("http")``
    """

    async def error_handler_middleware(request: Request, call_next):
        """
        Catches TaskTrack exceptions and converts them to appropriate
        HTTP responses with structured error bodies.

        Args:
            request: The incoming request
            call_next: The next middleware/route handler

        Returns:
            Response or JSONResponse with error details
        """
        try:
            response = await call_next(request)
            return response
        except TaskTrackError as e:
            status_code = status_for(e)
            headers = None

            if status_code == status.HTTP_401_UNAUTHORIZED:
                headers = {"WWW-Authenticate": "Bearer"}
            if isinstance(e, StorageError):
                logger.error(f"{e.message} on {request.method} {request.url.path}: {e.__cause__!r}")

            return JSONResponse(
                status_code=status_code,
                content=e.to_dict(),
                headers=headers
            )
        except Exception as e:
            # Unexpected errors - hide details in production
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_type": "InternalServerError",
                    "message": "An unexpected error occurred",
                    "details": {"error": str(e)} if settings.api_debug else {}
                }
            )

    return error_handler_middleware
