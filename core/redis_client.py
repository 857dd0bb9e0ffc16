"""
Redis connection helpers shared by the Redis-backed stores.
"""

from functools import wraps

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config import Settings
from exceptions import StorageError


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """
    Build the async Redis client for the configured server.

    Connections are opened lazily on first command, so this never blocks.
    """
    return aioredis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password or None,
        decode_responses=True,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
    )


def wrap_storage_errors(operation: str):
    """
    Decorator turning redis errors raised by a store coroutine into StorageError.

    The redis exception stays chained as ``__cause__`` for the server log.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except RedisError as e:
                raise StorageError(operation) from e

        return wrapper

    return decorator
