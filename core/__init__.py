"""
Core Module
===========

Storage and security components for TaskTrack:
- security: password hashing and the token authority
- credential_store: user registration and lookup
- task_store: owner-scoped task persistence
- redis_client: shared Redis client construction
"""

from core.credential_store import (
    CredentialStoreProtocol,
    InMemoryCredentialStore,
    RedisCredentialStore,
    create_credential_store,
)
from core.redis_client import create_redis_client
from core.security import PasswordHasher, TokenAuthority
from core.task_store import InMemoryTaskStore, RedisTaskStore, TaskStoreProtocol, create_task_store

__all__ = [
    'CredentialStoreProtocol',
    'InMemoryCredentialStore',
    'RedisCredentialStore',
    'create_credential_store',
    'create_redis_client',
    'PasswordHasher',
    'TokenAuthority',
    'InMemoryTaskStore',
    'RedisTaskStore',
    'TaskStoreProtocol',
    'create_task_store',
]
