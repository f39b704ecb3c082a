"""
Pydantic models for request/response validation.
"""
from .task_models import (
    TaskStatus,
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    ALLOWED_TRANSITIONS,
    is_transition_allowed,
)

__all__ = [
    "TaskStatus",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "ALLOWED_TRANSITIONS",
    "is_transition_allowed",
]
