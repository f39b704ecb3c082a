"""
Error types and their HTTP mapping.
"""
from .errors import (
    TaskTrackError,
    BadRequestError,
    UnauthorizedError,
    NotFoundError,
    ConflictError,
    InvalidTransitionError,
)

__all__ = [
    "TaskTrackError",
    "BadRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
]
