"""
Pydantic models for task-related requests and responses.
"""
from enum import Enum
from typing import Optional, Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    """Task status enumeration."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"


# Directed edges of the status lifecycle. Same-state requests never consult this table.
ALLOWED_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.DONE, TaskStatus.ARCHIVED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.TODO, TaskStatus.DONE, TaskStatus.ARCHIVED}),
    TaskStatus.DONE: frozenset({TaskStatus.TODO, TaskStatus.ARCHIVED}),
    TaskStatus.ARCHIVED: frozenset({TaskStatus.TODO}),
}


def is_transition_allowed(current: TaskStatus, requested: TaskStatus) -> bool:
    """Return True if a task may move from current to requested status."""
    current = TaskStatus(current)
    requested = TaskStatus(requested)
    if current == requested:
        return True
    return requested in ALLOWED_TRANSITIONS[current]


class TaskCreate(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., description="Task title", min_length=1, max_length=255)
    description: str = Field(..., description="Task description", max_length=5000)

    @field_validator('title')
    @classmethod
    def validate_not_whitespace(cls, v: str) -> str:
        """Reject titles made only of whitespace. Trimming happens in the service."""
        if not v.strip():
            raise ValueError("Title cannot be empty or contain only whitespace")
        return v


class TaskUpdate(BaseModel):
    """Request model for partially updating a task."""
    title: Optional[str] = Field(None, description="New title", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="New description", min_length=1, max_length=5000)
    status: Optional[TaskStatus] = Field(None, description="New status")

    @field_validator('title', 'description', 'status', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        """Omitting a field leaves it unchanged; an explicit null is invalid."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('title', mode='before')
    @classmethod
    def strip_title(cls, v):
        """Strip surrounding whitespace before the length checks run."""
        if isinstance(v, str):
            return v.strip()
        return v

    def changes(self) -> Dict[str, object]:
        """Fields the caller actually supplied, with statuses as plain strings."""
        data = self.model_dump(exclude_unset=True)
        if "status" in data:
            data["status"] = TaskStatus(data["status"]).value
        return data


class TaskResponse(BaseModel):
    """Task response model, serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    title: str
    description: str
    status: TaskStatus
    created_at: str
    updated_at: str
