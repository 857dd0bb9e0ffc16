"""
Authentication Endpoints
========================

User registration and login.

Login answers an unknown username and a wrong password with the same
401, and spends the same bcrypt time on both.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status

from api.dependencies import get_credential_store, get_password_hasher, get_token_authority
from api.middleware.rate_limiter import (
    auth_rate_limit,
    bind_rate_limit_settings,
    limiter,
    rate_limit_disabled,
)
from api.models.responses import ErrorResponse
from api.models.user import LoginRequest, RegisterRequest, TokenResponse
from core.credential_store import CredentialStoreProtocol
from core.security import PasswordHasher, TokenAuthority
from exceptions import InvalidCredentialsError
from models import UserIdentity

# Set up module logger
logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(bind_rate_limit_settings)])


@router.post(
    "/register",
    response_model=UserIdentity,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}}
)
@limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
async def register(
    request: Request,
    body: RegisterRequest,
    credential_store: CredentialStoreProtocol = Depends(get_credential_store)
):
    """
    Register a new user.

    Returns:
        The new user's id and username

    Raises:
        409: Username already taken
    """
    return await credential_store.create(body.username, body.password)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}}
)
@limiter.limit(auth_rate_limit, exempt_when=rate_limit_disabled)
async def login(
    request: Request,
    body: LoginRequest,
    credential_store: CredentialStoreProtocol = Depends(get_credential_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    token_authority: TokenAuthority = Depends(get_token_authority)
):
    """
    Exchange a username and password for a bearer token.

    Returns:
        TokenResponse with the signed token and its lifetime

    Raises:
        401: Unknown username or wrong password
    """
    user = await credential_store.find_by_username(body.username)

    if user is None:
        await asyncio.to_thread(hasher.dummy_verify)
        raise InvalidCredentialsError()

    if not await asyncio.to_thread(hasher.verify, body.password, user.password_hash):
        logger.info(f"Failed login for user {user.id}")
        raise InvalidCredentialsError()

    logger.info(f"User {user.id} logged in")
    return TokenResponse(
        token=token_authority.issue(user.id),
        expires_in=int(token_authority.expires_delta.total_seconds())
    )
