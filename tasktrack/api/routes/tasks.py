"""
Task API routes.

Handlers are plain functions so FastAPI runs the blocking sqlite calls in its
threadpool.
"""
import logging
from typing import List

from tasktrack.adapters.http_framework import HTTPFrameworkAdapter
from tasktrack.auth.dependencies import get_current_user_id
from tasktrack.dependencies.services import get_task_repository
from tasktrack.exceptions import NotFoundError
from tasktrack.models.task_models import TaskCreate, TaskUpdate, TaskResponse
from tasktrack.services import task_service
from tasktrack.storage.task_repository import TaskRepository

http_adapter = HTTPFrameworkAdapter()
Path = http_adapter.Path
Depends = http_adapter.Depends
Response = http_adapter.Response

router = http_adapter.create_router(prefix="/api/v1/tasks", tags=["tasks"])

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    task_data: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    repo: TaskRepository = Depends(get_task_repository),
) -> TaskResponse:
    """Create a new task for the calling user."""
    logger.info(f"Handling create task request for user {user_id}")
    task = task_service.create_task(repo, user_id, task_data)
    return TaskResponse(**task)


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    user_id: str = Depends(get_current_user_id),
    repo: TaskRepository = Depends(get_task_repository),
) -> List[TaskResponse]:
    """List the calling user's tasks, newest first."""
    tasks = task_service.list_tasks(repo, user_id)
    return [TaskResponse(**task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    repo: TaskRepository = Depends(get_task_repository),
) -> TaskResponse:
    """Get one of the calling user's tasks by ID."""
    task = task_service.get_task(repo, user_id, task_id)
    if task is None:
        logger.warning(f"Task {task_id} not found for user {user_id}")
        raise NotFoundError(TASK_NOT_FOUND)
    return TaskResponse(**task)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_data: TaskUpdate,
    task_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    repo: TaskRepository = Depends(get_task_repository),
) -> TaskResponse:
    """Partially update a task; status changes must follow the lifecycle."""
    logger.info(f"Handling update task request for task {task_id}")
    task = task_service.update_task(repo, user_id, task_id, task_data)
    if task is None:
        logger.warning(f"Task {task_id} not found for update")
        raise NotFoundError(TASK_NOT_FOUND)
    return TaskResponse(**task)


@router.delete("/{task_id}", status_code=204, response_class=Response)
def delete_task(
    task_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    repo: TaskRepository = Depends(get_task_repository),
) -> Response:
    """Permanently delete a task."""
    task = task_service.delete_task(repo, user_id, task_id)
    if task is None:
        logger.warning(f"Task {task_id} not found for deletion")
        raise NotFoundError(TASK_NOT_FOUND)
    return Response(status_code=204)
