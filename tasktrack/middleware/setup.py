"""
Middleware setup and configuration.
"""
from starlette.middleware.cors import CORSMiddleware

from tasktrack.config import Settings
from tasktrack.monitoring import MetricsMiddleware
from tasktrack.middleware.security_headers import SecurityHeadersMiddleware


def setup_middleware(app, settings: Settings):
    """Set up all middleware for the FastAPI application."""
    # Starlette runs the last-added middleware first, so metrics (which sets
    # the request ID) is added last to wrap everything else.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-User-Id", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Trace-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(MetricsMiddleware)
