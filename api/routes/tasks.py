"""
Task Endpoints
==============

CRUD for the authenticated user's tasks.

Every route depends on ``get_current_user``; the owner passed to the
store is always the verified token subject, never anything from the
request body or path.
"""

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_current_user, get_task_store
from api.models.requests import TaskCreateRequest, TaskUpdateRequest
from api.models.responses import ErrorResponse
from core.task_store import TaskStoreProtocol
from models import Task

router = APIRouter(
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}}
)

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


@router.get("", response_model=list[Task])
async def list_tasks(
    user_id: str = Depends(get_current_user),
    task_store: TaskStoreProtocol = Depends(get_task_store)
):
    """List the caller's tasks in creation order."""
    return await task_store.list_by_owner(user_id)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreateRequest,
    user_id: str = Depends(get_current_user),
    task_store: TaskStoreProtocol = Depends(get_task_store)
):
    """Create a task owned by the caller. New tasks start incomplete."""
    return await task_store.create(user_id, body.title, body.description)


@router.get("/{task_id}", response_model=Task, responses=_NOT_FOUND)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user),
    task_store: TaskStoreProtocol = Depends(get_task_store)
):
    """Fetch one of the caller's tasks."""
    return await task_store.get(task_id, user_id)


@router.put("/{task_id}", response_model=Task, responses=_NOT_FOUND)
async def update_task(
    task_id: str,
    body: TaskUpdateRequest,
    user_id: str = Depends(get_current_user),
    task_store: TaskStoreProtocol = Depends(get_task_store)
):
    """
    Update title, description and/or completion of one of the caller's tasks.

    Raises:
        404: No such task, or it belongs to another user
    """
    return await task_store.update(task_id, user_id, body.to_update())


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND)
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user),
    task_store: TaskStoreProtocol = Depends(get_task_store)
):
    """
    Delete one of the caller's tasks.

    Raises:
        404: No such task, or it belongs to another user
    """
    await task_store.delete(task_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
