"""
Service container for dependency injection.
Centralizes service initialization and provides access to all services.
"""
import logging
from typing import Optional

from tasktrack.config import Settings
from tasktrack.database import TaskDatabase
from tasktrack.storage.task_repository import TaskRepository

logger = logging.getLogger(__name__)

# Global service instance
_service_instance: Optional['ServiceContainer'] = None


class ServiceContainer:
    """Container for all application services."""

    def __init__(self, settings: Optional[Settings] = None, db: Optional[TaskDatabase] = None):
        self.settings = settings or Settings.from_env()
        self.db = db or TaskDatabase(
            self.settings.db_path,
            slow_threshold=self.settings.query_slow_threshold,
            enable_query_logging=self.settings.enable_query_logging,
        )
        self.task_repository = TaskRepository(self.db)
        logger.info(f"Services initialized (database: {self.db.db_path})")


def get_services() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ServiceContainer()
    return _service_instance


def set_services(container: Optional[ServiceContainer]) -> None:
    """Replace the global service container (None resets it)."""
    global _service_instance
    _service_instance = container


def get_task_repository() -> TaskRepository:
    """FastAPI dependency returning the task repository."""
    return get_services().task_repository
