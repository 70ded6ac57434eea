from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_task_store
from ..errors import NotFoundError
from ..schemas import (
    CreatedResponse,
    ErrorResponse,
    MessageResponse,
    TaskCreate,
    TaskListParams,
    TaskListResponse,
    TaskOut,
    TaskUpdate,
    parse_records,
)
from ..stores import TaskStore
from ..utils import filter_tasks, sort_tasks, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])

_store_error = {500: {"model": ErrorResponse, "description": "Store error"}}
_missing_fields = {400: {"model": ErrorResponse, "description": "Title and description are required"}}


# PUBLIC_INTERFACE
@router.post(
    "/to-do-list",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task with status false and return its store-assigned id.",
    responses={**_missing_fields, **_store_error},
)
def create_task(payload: TaskCreate, store: TaskStore = Depends(get_task_store)) -> CreatedResponse:
    """
    Create a new task.
    """
    payload.require_fields()
    now = utc_now()
    task = {
        "title": payload.title,
        "description": payload.description,
        "status": False,
        "createdAt": now,
        "updatedAt": now,
    }
    task_id = store.add(task)
    logger.info("Task %s added: %s", task_id, task)
    return CreatedResponse(message="Task added successfully", id=task_id)


# PUBLIC_INTERFACE
@router.put(
    "/todo/{task_id}",
    response_model=MessageResponse,
    summary="Update Task",
    description=(
        "Overwrite title, description and status of a task. An omitted status is "
        "written as false. The task is not looked up first; a missing task is "
        "reported as a store error."
    ),
    responses={**_missing_fields, **_store_error},
)
def update_task(task_id: str, payload: TaskUpdate, store: TaskStore = Depends(get_task_store)) -> MessageResponse:
    payload.require_fields()
    store.update(
        task_id,
        {
            "title": payload.title,
            "description": payload.description,
            "status": payload.resolved_status(),
            "updatedAt": utc_now(),
        },
    )
    return MessageResponse(message="Task updated successfully")


# PUBLIC_INTERFACE
@router.get(
    "/list",
    response_model=TaskListResponse,
    summary="List Tasks",
    description=(
        "List tasks with optional search and sorting.\n\n"
        "Query parameters:\n"
        "- search: case-insensitive substring matched against title or description\n"
        "- sortBy: 'timestamp' (creation time) or 'status'\n"
        "- order: 'asc' or 'desc' (default desc)\n"
        "- unrecognized sortBy or order values fall back to store order and descending\n\n"
        "Returns 404 when the store query itself returns nothing."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "No tasks found"},
        **_store_error,
    },
)
def list_tasks(
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field: timestamp or status; other values keep store order"),
    order: str = Query("desc", description="Sort direction: asc, anything else sorts descending"),
    search: Optional[str] = Query(None, description="Search text for title/description"),
    store: TaskStore = Depends(get_task_store),
) -> TaskListResponse:
    params = TaskListParams(sort_by=sort_by, order=order, search=search)

    # The title range query only narrows the fetch; filter_tasks decides matches.
    fetched = store.query(title_prefix=params.search or None)
    if not fetched:
        raise NotFoundError("No tasks found")

    tasks = filter_tasks(parse_records(TaskOut, fetched), params.search)
    return TaskListResponse(tasks=sort_tasks(tasks, params.sort_by, params.order))


# PUBLIC_INTERFACE
@router.delete(
    "/list/{task_id}",
    response_model=MessageResponse,
    summary="Delete Task",
    description="Delete a task by id. Succeeds whether or not the task exists.",
    responses=_store_error,
)
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> MessageResponse:
    store.delete(task_id)
    return MessageResponse(message="Task deleted successfully")
