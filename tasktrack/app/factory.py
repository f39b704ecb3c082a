"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from tasktrack import __version__
from tasktrack.adapters.http_framework import HTTPFrameworkAdapter
from tasktrack.config import Settings
from tasktrack.database import TaskDatabase
from tasktrack.dependencies.services import ServiceContainer, set_services
from tasktrack.exceptions.handlers import setup_exception_handlers
from tasktrack.middleware.logging_setup import setup_logging
from tasktrack.middleware.setup import setup_middleware
from tasktrack.api.routes.health import router as health_router
from tasktrack.api.routes.tasks import router as tasks_router
from tasktrack import tracing

http_adapter = HTTPFrameworkAdapter()

logger = logging.getLogger(__name__)


def _make_lifespan(services: ServiceContainer):
    @asynccontextmanager
    async def lifespan(app):
        """Manage application lifespan."""
        logger.info("Application starting up...")
        if services.settings.tracing_enabled:
            tracing.setup_tracing(services.settings)
            logger.info("Distributed tracing enabled")
        yield
        logger.info("Application shutting down...")
        if services.settings.tracing_enabled:
            tracing.shutdown_tracing()
        logger.info("Shutdown complete")
    return lifespan


def create_app(settings: Optional[Settings] = None, db: Optional[TaskDatabase] = None):
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted
        db: Pre-built database (tests pass a temporary one)

    Returns:
        Configured FastAPI app instance ready to run.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    services = ServiceContainer(settings=settings, db=db)
    set_services(services)

    app = http_adapter.create_app(
        title="Task Tracking Service",
        description="Multi-tenant task tracking API",
        version=__version__,
        lifespan=_make_lifespan(services),
    )

    setup_middleware(app, settings)
    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(tasks_router)

    if settings.tracing_enabled:
        tracing.instrument_fastapi(app)

    logger.info("FastAPI app created and configured")
    return app
