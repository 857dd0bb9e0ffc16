"""
Dependency Injection Functions
==============================

FastAPI dependencies for the stores, the token authority and
authentication.

All components are built once by ``create_app`` and kept on
``app.state``; these functions only hand them out.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.credential_store import CredentialStoreProtocol
from core.security import PasswordHasher, TokenAuthority
from core.task_store import TaskStoreProtocol
from exceptions import InvalidTokenError, UnauthenticatedError

# Set up module logger
logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)


def get_token_authority(request: Request) -> TokenAuthority:
    """Dependency returning the app's TokenAuthority."""
    return request.app.state.token_authority


def get_password_hasher(request: Request) -> PasswordHasher:
    """Dependency returning the app's PasswordHasher."""
    return request.app.state.password_hasher


def get_credential_store(request: Request) -> CredentialStoreProtocol:
    """Dependency returning the app's credential store."""
    return request.app.state.credential_store


def get_task_store(request: Request) -> TaskStoreProtocol:
    """Dependency returning the app's task store."""
    return request.app.state.task_store


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_authority: TokenAuthority = Depends(get_token_authority)
) -> str:
    """
    Dependency resolving the caller's user id from the Bearer token.

    Every protected route depends on this, so it runs before the route
    body. Failing here means the handler never executes.

    The verified id is also stored on ``request.state.user_id`` for
    anything downstream that only has the request.

    Args:
        request: The incoming request
        credentials: HTTP Authorization header with Bearer token
        token_authority: Verifier for the token

    Returns:
        str: The authenticated user id

    Raises:
        UnauthenticatedError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthenticatedError("Access denied. No token provided.")

    try:
        user_id = token_authority.verify(credentials.credentials)
    except InvalidTokenError as e:
        # Expired and malformed look the same to the client
        logger.debug(f"Rejected token: {e.message}")
        raise UnauthenticatedError() from e

    request.state.user_id = user_id
    return user_id
