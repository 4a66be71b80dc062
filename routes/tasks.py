import json
import logging
import math
from contextlib import contextmanager
from typing import Iterator, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from errors import InfrastructureError, NoChangesError, ValidationError
from mapper import from_item, to_item, to_item_changes
from repository import TaskRepository
from schemas import (
    DeletedTask,
    RawPayload,
    TaskList,
    new_task,
    utc_now,
    validate_create,
    validate_filters,
    validate_update,
)
from utils import response

router = APIRouter()
logger = logging.getLogger(__name__)


def get_repository(request: Request) -> TaskRepository:
    """Repository configured at startup - used as FastAPI dependency"""
    return request.app.state.repository


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _reject_constant(name: str) -> None:
    raise ValueError(f"Unsupported JSON constant: {name}")


async def parse_payload(request: Request) -> RawPayload:
    """
    Decode the JSON request body

    Raises:
        ValidationError: If the body is not a JSON object
    """
    raw = await request.body()
    if not raw.strip():
        return RawPayload({})
    try:
        # Non-finite numbers cannot be echoed back in a JSON response
        payload = json.loads(raw, parse_float=_finite_float, parse_constant=_reject_constant)
    except ValueError:
        raise ValidationError.single("body", "Invalid JSON in request body")
    if not isinstance(payload, dict):
        raise ValidationError.single("body", "Request body must be a JSON object")
    return RawPayload(payload)


def require_task_id(task_id: Optional[str]) -> str:
    if not task_id or not task_id.strip():
        raise ValidationError.single("id", "Task ID is required", task_id)
    return task_id


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Report unclassified store failures without exposing their detail"""
    try:
        yield
    except SQLAlchemyError as exc:
        raise InfrastructureError(message) from exc


@router.post("/tasks", status_code=201)
async def create_task(
    request: Request,
    repository: TaskRepository = Depends(get_repository)
) -> JSONResponse:
    """
    Create a new task

    Args:
        request: FastAPI request carrying the task body
        repository: Task repository

    Returns:
        Envelope with the created task
    """
    data = validate_create(await parse_payload(request))
    task = new_task(data)

    with store_errors("Failed to create task"):
        saved = await run_in_threadpool(repository.create, to_item(task))

    logger.info("Task created: %s", task.id)
    return response.created(from_item(saved))


@router.get("/tasks")
def list_tasks(
    user_id: Optional[str] = Query(None, alias="userId"),
    status: Optional[str] = None,
    priority: Optional[str] = None,
    repository: TaskRepository = Depends(get_repository)
) -> JSONResponse:
    """
    Get all tasks for a user, newest first

    Args:
        user_id: Owner, defaults to the placeholder user
        status: Optional status filter
        priority: Optional priority filter
        repository: Task repository

    Returns:
        Envelope with tasks, count and the filters applied
    """
    filters = validate_filters({"userId": user_id, "status": status, "priority": priority})
    logger.info("Fetching tasks for user %s with filters %s", filters.user_id, filters)

    with store_errors("Failed to fetch tasks"):
        items = repository.get_by_user_id(
            filters.user_id,
            filters.model_dump(mode="json", include={"status", "priority"}),
        )

    tasks = [from_item(item) for item in items]
    logger.info("Found %d tasks for user %s", len(tasks), filters.user_id)
    return response.success(TaskList(tasks=tasks, count=len(tasks), filters=filters))


@router.get("/tasks/{task_id}")
def get_task(
    task_id: str,
    repository: TaskRepository = Depends(get_repository)
) -> JSONResponse:
    """
    Get task details

    Args:
        task_id: Task ID
        repository: Task repository

    Returns:
        Envelope with the task, or a 404 envelope
    """
    task_id = require_task_id(task_id)

    with store_errors("Failed to fetch task"):
        item = repository.get_by_id(task_id)

    if item is None:
        logger.info("Task not found: %s", task_id)
        return response.not_found("Task")

    return response.success(from_item(item))


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    request: Request,
    repository: TaskRepository = Depends(get_repository)
) -> JSONResponse:
    """
    Update a task

    Args:
        task_id: Task ID
        request: FastAPI request carrying the fields to change
        repository: Task repository

    Returns:
        Envelope with the updated task
    """
    task_id = require_task_id(task_id)
    changes = validate_update(await parse_payload(request))
    if changes.is_empty():
        raise NoChangesError()

    logger.info("Updating task %s with fields %s", task_id, sorted(changes.model_fields_set))

    with store_errors("Failed to update task"):
        updated = await run_in_threadpool(
            repository.update, task_id, to_item_changes(changes, utc_now())
        )

    return response.success(from_item(updated))


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    repository: TaskRepository = Depends(get_repository)
) -> JSONResponse:
    """
    Delete a task

    Args:
        task_id: Task ID
        repository: Task repository

    Returns:
        Envelope with a message and the deleted task
    """
    task_id = require_task_id(task_id)

    with store_errors("Failed to delete task"):
        deleted = repository.delete(task_id)

    logger.info("Task deleted: %s", task_id)
    return response.success(
        DeletedTask(message="Task deleted successfully", deleted_task=from_item(deleted))
    )
