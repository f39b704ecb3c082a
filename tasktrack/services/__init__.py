"""
Service layer for business logic.
Services contain pure business logic without HTTP framework dependencies.
"""
from tasktrack.services import task_service

__all__ = ["task_service"]
