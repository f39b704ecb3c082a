"""
Storage layer for task persistence.
"""
from .task_repository import TaskRepository

__all__ = ['TaskRepository']
