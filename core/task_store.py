"""
Task Store
==========

Persists tasks, each bound to the user that created it.

Every read and write is scoped to an owner id. A task that exists but
belongs to someone else is reported exactly like a task that does not
exist (TaskNotFoundError), so callers cannot discover other users' ids.

Two implementations share one protocol:
- RedisTaskStore: durable storage, used in production
- InMemoryTaskStore: process-local, used for development and tests

Concurrent updates of the same task are last-write-wins.
"""

import logging
import uuid
from typing import Optional, Protocol

import redis.asyncio as aioredis

from core.redis_client import wrap_storage_errors
from exceptions import TaskNotFoundError
from models import Task, TaskUpdate

# Set up module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Protocol Definition (for dependency injection and testing)
# =============================================================================


class TaskStoreProtocol(Protocol):
    """Protocol defining the interface for task storage."""

    async def create(self, owner_id: str, title: str, description: str = "") -> Task:
        """
        Create an incomplete task owned by ``owner_id``.

        Returns:
            The full stored record
        """
        ...

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        """Return the owner's tasks in insertion order (empty if none)."""
        ...

    async def get(self, task_id: str, owner_id: str) -> Task:
        """
        Raises:
            TaskNotFoundError: No such task for this owner
        """
        ...

    async def update(self, task_id: str, owner_id: str, fields: TaskUpdate) -> Task:
        """
        Apply the provided fields and return the updated task.

        Raises:
            TaskNotFoundError: No such task for this owner
        """
        ...

    async def delete(self, task_id: str, owner_id: str) -> None:
        """
        Raises:
            TaskNotFoundError: No such task for this owner
        """
        ...

    async def ping(self) -> None:
        """Raise StorageError if the backend is unreachable."""
        ...


def _new_task(owner_id: str, title: str, description: str) -> Task:
    return Task(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        title=title,
        description=description,
        is_complete=False,
    )


# =============================================================================
# Redis Implementation
# =============================================================================


class RedisTaskStore:
    """
    Redis-backed task store.

    Key layout:
        {prefix}:task:{task_id}          JSON task record
        {prefix}:owner:{owner_id}:tasks  list of task ids, insertion order

    Writes touching both keys go through a MULTI pipeline so a failure
    never leaves a record without its index entry (or the reverse).
    """

    def __init__(self, client: aioredis.Redis, key_prefix: str = "tasktrack"):
        self.client = client
        self.key_prefix = key_prefix

    def _task_key(self, task_id: str) -> str:
        return f"{self.key_prefix}:task:{task_id}"

    def _owner_key(self, owner_id: str) -> str:
        return f"{self.key_prefix}:owner:{owner_id}:tasks"

    async def _load_owned(self, task_id: str, owner_id: str) -> Task:
        data = await self.client.get(self._task_key(task_id))
        if data is None:
            raise TaskNotFoundError(task_id)

        task = Task.model_validate_json(data)
        if task.owner_id != owner_id:
            raise TaskNotFoundError(task_id)
        return task

    @wrap_storage_errors("task creation")
    async def create(self, owner_id: str, title: str, description: str = "") -> Task:
        task = _new_task(owner_id, title, description)

        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(self._task_key(task.id), task.model_dump_json())
            pipe.rpush(self._owner_key(owner_id), task.id)
            await pipe.execute()

        logger.info(f"[{task.id}] Task created for user {owner_id}")
        return task

    @wrap_storage_errors("task listing")
    async def list_by_owner(self, owner_id: str) -> list[Task]:
        task_ids = await self.client.lrange(self._owner_key(owner_id), 0, -1)
        if not task_ids:
            return []

        records = await self.client.mget([self._task_key(task_id) for task_id in task_ids])

        tasks = []
        for data in records:
            # Deleted between LRANGE and MGET
            if data is None:
                continue
            task = Task.model_validate_json(data)
            if task.owner_id == owner_id:
                tasks.append(task)
        return tasks

    @wrap_storage_errors("task lookup")
    async def get(self, task_id: str, owner_id: str) -> Task:
        return await self._load_owned(task_id, owner_id)

    @wrap_storage_errors("task update")
    async def update(self, task_id: str, owner_id: str, fields: TaskUpdate) -> Task:
        task = await self._load_owned(task_id, owner_id)
        updated = task.model_copy(update=fields.changes())

        # Only overwrite an existing record so a delete racing this update wins
        written = await self.client.set(self._task_key(task_id), updated.model_dump_json(), xx=True)
        if not written:
            raise TaskNotFoundError(task_id)

        logger.info(f"[{task_id}] Task updated")
        return updated

    @wrap_storage_errors("task deletion")
    async def delete(self, task_id: str, owner_id: str) -> None:
        await self._load_owned(task_id, owner_id)

        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(self._task_key(task_id))
            pipe.lrem(self._owner_key(owner_id), 0, task_id)
            await pipe.execute()

        logger.info(f"[{task_id}] Task deleted")

    @wrap_storage_errors("ping")
    async def ping(self) -> None:
        await self.client.ping()


# =============================================================================
# In-Memory Implementation
# =============================================================================


class InMemoryTaskStore:
    """Dict-backed task store. Dicts keep insertion order, which gives listing order."""

    def __init__(self):
        self._tasks: dict[str, Task] = {}

    def _load_owned(self, task_id: str, owner_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            raise TaskNotFoundError(task_id)
        return task

    async def create(self, owner_id: str, title: str, description: str = "") -> Task:
        task = _new_task(owner_id, title, description)
        self._tasks[task.id] = task

        logger.info(f"[{task.id}] Task created for user {owner_id}")
        return task

    async def list_by_owner(self, owner_id: str) -> list[Task]:
        return [task for task in self._tasks.values() if task.owner_id == owner_id]

    async def get(self, task_id: str, owner_id: str) -> Task:
        return self._load_owned(task_id, owner_id)

    async def update(self, task_id: str, owner_id: str, fields: TaskUpdate) -> Task:
        task = self._load_owned(task_id, owner_id)
        updated = task.model_copy(update=fields.changes())
        self._tasks[task_id] = updated

        logger.info(f"[{task_id}] Task updated")
        return updated

    async def delete(self, task_id: str, owner_id: str) -> None:
        self._load_owned(task_id, owner_id)
        del self._tasks[task_id]

        logger.info(f"[{task_id}] Task deleted")

    async def ping(self) -> None:
        return None


# =============================================================================
# Factory Function
# =============================================================================


def create_task_store(
    client: Optional[aioredis.Redis] = None,
    key_prefix: str = "tasktrack"
) -> TaskStoreProtocol:
    """
    Factory function to create a task store.

    Args:
        client: Redis client. None selects the in-memory store.
        key_prefix: Namespace for Redis keys

    Returns:
        TaskStoreProtocol implementation
    """
    if client is None:
        return InMemoryTaskStore()
    return RedisTaskStore(client, key_prefix=key_prefix)
