"""
Credential Store
================

Persists users (username + bcrypt hash) and looks them up by username.

Two implementations share one protocol:
- RedisCredentialStore: durable storage, used in production
- InMemoryCredentialStore: process-local, used for development and tests

Usernames are case-sensitive and unique. Users are never updated or
deleted once created.
"""

import asyncio
import logging
import uuid
from typing import Optional, Protocol

import redis.asyncio as aioredis

from core.redis_client import wrap_storage_errors
from core.security import PasswordHasher
from exceptions import DuplicateUsernameError
from models import User, UserIdentity

# Set up module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Protocol Definition (for dependency injection and testing)
# =============================================================================


class CredentialStoreProtocol(Protocol):
    """Protocol defining the interface for credential storage."""

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        Look up a user by exact, case-sensitive username.

        Returns:
            The stored User (including its hash) or None
        """
        ...

    async def create(self, username: str, password: str) -> UserIdentity:
        """
        Register a new user.

        Raises:
            DuplicateUsernameError: If the username is taken
            StorageError: If the backend fails
        """
        ...

    async def ping(self) -> None:
        """Raise StorageError if the backend is unreachable."""
        ...


async def _new_user(username: str, password: str, hasher: PasswordHasher) -> User:
    # bcrypt is deliberately slow; keep it off the event loop
    password_hash = await asyncio.to_thread(hasher.hash, password)
    return User(
        id=str(uuid.uuid4()),
        username=username,
        password_hash=password_hash,
    )


# =============================================================================
# Redis Implementation
# =============================================================================


class RedisCredentialStore:
    """
    Redis-backed credential store.

    Each user is a single JSON document under ``{prefix}:username:{username}``.
    Registration writes it with ``SET NX``, so two concurrent registrations
    of the same name cannot both succeed.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        hasher: PasswordHasher,
        key_prefix: str = "tasktrack"
    ):
        self.client = client
        self.hasher = hasher
        self.key_prefix = key_prefix

    def _user_key(self, username: str) -> str:
        return f"{self.key_prefix}:username:{username}"

    @wrap_storage_errors("user lookup")
    async def find_by_username(self, username: str) -> Optional[User]:
        data = await self.client.get(self._user_key(username))
        if data is None:
            return None
        return User.model_validate_json(data)

    @wrap_storage_errors("user registration")
    async def create(self, username: str, password: str) -> UserIdentity:
        user = await _new_user(username, password, self.hasher)

        created = await self.client.set(
            self._user_key(username),
            user.model_dump_json(),
            nx=True
        )
        if not created:
            raise DuplicateUsernameError(username)

        logger.info(f"Registered user {user.id}")
        return user.identity()

    @wrap_storage_errors("ping")
    async def ping(self) -> None:
        await self.client.ping()


# =============================================================================
# In-Memory Implementation
# =============================================================================


class InMemoryCredentialStore:
    """
    Dict-backed credential store. Contents are lost when the process exits.

    The final duplicate check and the insert run without an await in
    between, so they are atomic on the event loop.
    """

    def __init__(self, hasher: PasswordHasher):
        self.hasher = hasher
        self._users: dict[str, User] = {}

    async def find_by_username(self, username: str) -> Optional[User]:
        return self._users.get(username)

    async def create(self, username: str, password: str) -> UserIdentity:
        if username in self._users:
            raise DuplicateUsernameError(username)

        user = await _new_user(username, password, self.hasher)
        # a concurrent registration may have won while hashing
        if username in self._users:
            raise DuplicateUsernameError(username)
        self._users[username] = user

        logger.info(f"Registered user {user.id}")
        return user.identity()

    async def ping(self) -> None:
        return None


# =============================================================================
# Factory Function
# =============================================================================


def create_credential_store(
    hasher: PasswordHasher,
    client: Optional[aioredis.Redis] = None,
    key_prefix: str = "tasktrack"
) -> CredentialStoreProtocol:
    """
    Factory function to create a credential store.

    Args:
        hasher: Password hasher used at registration
        client: Redis client. None selects the in-memory store.
        key_prefix: Namespace for Redis keys

    Returns:
        CredentialStoreProtocol implementation
    """
    if client is None:
        return InMemoryCredentialStore(hasher)
    return RedisCredentialStore(client, hasher, key_prefix=key_prefix)
