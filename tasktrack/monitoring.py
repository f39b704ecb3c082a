"""
Monitoring and observability utilities for the task service.

Provides:
- Prometheus metrics (requests, latencies, errors)
- Request tracing (request IDs propagated through a context variable)
- Health information for liveness/readiness endpoints
"""
import re
import time
import uuid
import logging
from typing import Callable, Dict, Any
from contextvars import ContextVar

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge, generate_latest

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

service_uptime_seconds = Gauge(
    'service_uptime_seconds',
    'Service uptime in seconds'
)

service_start_time = time.time()

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting Prometheus metrics and request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Honour a caller-supplied request ID so traces join up across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_id(request_id)

        start_time = time.time()
        service_uptime_seconds.set(time.time() - service_start_time)

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            endpoint = self._get_endpoint_path(request)
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            logger.error(
                "Request failed with exception",
                exc_info=True,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "endpoint": endpoint,
                    "duration_seconds": duration,
                    "exception_type": type(e).__name__,
                }
            )
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type="exception"
            ).inc()
            raise

        duration = time.time() - start_time
        status_code = response.status_code
        endpoint = self._get_endpoint_path(request)

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).observe(duration)

        if status_code >= 400:
            error_type = "client_error" if status_code < 500 else "server_error"
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type=error_type
            ).inc()
            log = logger.warning if status_code < 500 else logger.error
            log(
                f"Request error: {request.method} {request.url.path} -> {status_code}",
                extra={"endpoint": endpoint, "status_code": status_code, "duration_seconds": duration}
            )
        else:
            logger.info(
                f"Request completed: {request.method} {request.url.path} -> {status_code} in {duration:.4f}s",
                extra={"endpoint": endpoint, "status_code": status_code, "duration_seconds": duration}
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Trace-ID"] = request_id
        return response

    @staticmethod
    def _get_endpoint_path(request: Request) -> str:
        """Route template for metric labels, e.g. /api/v1/tasks/{task_id}."""
        route = request.scope.get("route")
        path = getattr(route, "path", None)
        if path:
            return path
        # Unmatched requests: collapse ids to keep label cardinality bounded
        path = _UUID_RE.sub('{id}', request.url.path)
        path = re.sub(r'/\d+', '/{id}', path)
        return path[:100]


def get_metrics() -> bytes:
    """Get Prometheus metrics in text exposition format."""
    return generate_latest()


def check_database_health(db) -> Dict[str, Any]:
    """
    Check database connectivity and health.

    Args:
        db: TaskDatabase instance

    Returns:
        Dictionary with database health status
    """
    start_time = time.time()
    try:
        db.ping()
        return {
            "status": "healthy",
            "connectivity": "connected",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
            "type": getattr(db, 'db_type', 'unknown')
        }
    except Exception as e:
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.warning(
            "Database health check failed",
            extra={
                "error_type": type(e).__name__,
                "error_message": str(e),
                "response_time_ms": response_time_ms
            }
        )
        return {
            "status": "unhealthy",
            "connectivity": "disconnected",
            "response_time_ms": response_time_ms,
            "error": str(e),
            "error_type": type(e).__name__
        }


def get_health_info(db=None) -> Dict[str, Any]:
    """
    Get health information including uptime and component status.

    Args:
        db: Optional database instance for database health checks

    Returns:
        Dictionary with health information including component statuses
    """
    uptime = time.time() - service_start_time
    components = {
        "service": {
            "status": "healthy",
            "uptime_seconds": uptime,
            "uptime_formatted": _format_uptime(uptime)
        }
    }
    overall_status = "healthy"

    if db is not None:
        db_health = check_database_health(db)
        components["database"] = db_health
        if db_health.get("status") == "unhealthy":
            overall_status = "unhealthy"

    return {
        "status": overall_status,
        "service": "tasktrack",
        "timestamp": time.time(),
        "uptime_seconds": uptime,
        "uptime_formatted": _format_uptime(uptime),
        "components": components
    }


def _format_uptime(seconds: float) -> str:
    """Format uptime in human-readable format."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    elif hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
