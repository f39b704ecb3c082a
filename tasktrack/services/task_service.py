"""
Task service - business logic for task operations.
This layer contains no HTTP framework dependencies.

Absence is returned as None; business-rule failures (duplicates, invalid
status transitions) are raised. Storage errors propagate unchanged.
"""
import sqlite3
import logging
from typing import Optional, Dict, Any, List

from tasktrack.exceptions import ConflictError, InvalidTransitionError
from tasktrack.models.task_models import TaskCreate, TaskUpdate, TaskStatus, is_transition_allowed
from tasktrack.storage.task_repository import TaskRepository

logger = logging.getLogger(__name__)

DUPLICATE_TASK_DETAIL = "A task with the same title and description already exists for this user."


def create_task(repo: TaskRepository, user_id: str, task_data: TaskCreate) -> Dict[str, Any]:
    """
    Create a new task for a user.

    Args:
        repo: Task repository
        user_id: Owning user
        task_data: Validated creation payload

    Returns:
        Created task data as dictionary

    Raises:
        ConflictError: If the user already has a task with this title and description
    """
    title = task_data.title.strip()
    description = task_data.description

    existing = repo.get_by_title_and_description(user_id, title, description)
    if existing:
        logger.warning(f"Duplicate task rejected for user {user_id} (matches task {existing['id']})")
        raise ConflictError(DUPLICATE_TASK_DETAIL)

    try:
        return repo.create(user_id, title, description)
    except sqlite3.IntegrityError as e:
        # Lost a race with a concurrent identical create
        if "unique constraint" in str(e).lower():
            logger.warning(f"Duplicate task rejected by constraint for user {user_id}")
            raise ConflictError(DUPLICATE_TASK_DETAIL) from e
        raise


def get_task(repo: TaskRepository, user_id: str, task_id: str) -> Optional[Dict[str, Any]]:
    """Get a task by ID."""
    return repo.get_by_id(user_id, task_id)


def list_tasks(repo: TaskRepository, user_id: str) -> List[Dict[str, Any]]:
    """List a user's tasks, newest first."""
    return repo.list_by_user(user_id)


def update_task(
    repo: TaskRepository, user_id: str, task_id: str, task_data: TaskUpdate
) -> Optional[Dict[str, Any]]:
    """
    Update a task, enforcing the status lifecycle.

    Args:
        repo: Task repository
        user_id: Owning user
        task_id: Task ID
        task_data: Validated partial update

    Returns:
        Updated task data, or None if the user has no such task

    Raises:
        InvalidTransitionError: If the requested status is not reachable from the current one
    """
    current = repo.get_by_id(user_id, task_id)
    if current is None:
        return None

    changes = task_data.changes()
    requested = changes.get("status")
    if requested is not None and requested != current["status"]:
        if not is_transition_allowed(TaskStatus(current["status"]), TaskStatus(requested)):
            logger.warning(
                f"Rejected status transition for task {task_id}: {current['status']} -> {requested}"
            )
            raise InvalidTransitionError(current["status"], requested)

    return repo.update(user_id, task_id, **changes)


def delete_task(repo: TaskRepository, user_id: str, task_id: str) -> Optional[Dict[str, Any]]:
    """Delete a task, returning the removed record or None."""
    return repo.delete(user_id, task_id)
