"""
Health and metrics API routes.
"""
import logging

from prometheus_client import CONTENT_TYPE_LATEST

from tasktrack.adapters.http_framework import HTTPFrameworkAdapter
from tasktrack.dependencies.services import get_services
from tasktrack.monitoring import get_health_info, get_metrics

http_adapter = HTTPFrameworkAdapter()
Response = http_adapter.Response
JSONResponse = http_adapter.JSONResponse

router = http_adapter.create_router(tags=["health"])

logger = logging.getLogger(__name__)


@router.get("/")
def root():
    """Simple liveness banner."""
    return {"message": "API is running!"}


@router.get("/healthz")
def liveness():
    """Liveness probe: the process is up and serving requests."""
    return {"status": "ok"}


@router.get("/readyz")
def readiness():
    """Readiness probe: the database answers a trivial query."""
    try:
        get_services().db.ping()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(content={"status": "not ready"}, status_code=503)
    return {"status": "ready"}


@router.get("/health")
def health_check():
    """Comprehensive health check endpoint with component status (database, service)."""
    health_info = get_health_info(get_services().db)
    if health_info.get("status") == "unhealthy":
        return JSONResponse(content=health_info, status_code=503)
    return health_info


@router.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
