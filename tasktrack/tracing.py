"""
Distributed tracing for the task service using OpenTelemetry.

Provides:
- Tracer provider setup with optional console and OTLP exporters
- FastAPI instrumentation
- A span context manager used around every database statement

When tracing is not set up, spans go to OpenTelemetry's no-op tracer.
"""
import logging
from typing import Optional, Dict, Any
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource

from tasktrack import __version__
from tasktrack.config import Settings

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None


def setup_tracing(settings: Settings) -> None:
    """Initialize OpenTelemetry tracing for the service."""
    global _provider

    if _provider is not None:
        logger.warning("Tracing already initialized")
        return

    logger.info(
        "Initializing OpenTelemetry tracing",
        extra={
            "service_name": settings.otel_service_name,
            "otlp_endpoint": settings.otel_otlp_endpoint,
            "use_otlp": settings.otel_otlp_exporter,
            "enable_console": settings.otel_console_exporter,
        }
    )

    resource = Resource.create({
        "service.name": settings.otel_service_name,
        "service.version": __version__,
    })
    provider = TracerProvider(resource=resource)

    if settings.otel_otlp_exporter:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otel_otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info("OTLP exporter configured", extra={"endpoint": settings.otel_otlp_endpoint})

    if settings.otel_console_exporter:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console exporter enabled")

    trace.set_tracer_provider(provider)
    _provider = provider
    logger.info("OpenTelemetry tracing initialized successfully")


def shutdown_tracing() -> None:
    """Flush and stop span processors."""
    global _provider
    if _provider is not None:
        _provider.shutdown()
        _provider = None


def instrument_fastapi(app) -> None:
    """Instrument FastAPI application with OpenTelemetry."""
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    FastAPIInstrumentor.instrument_app(app)
    logger.info("FastAPI instrumentation enabled")


def get_tracer() -> trace.Tracer:
    """Get a tracer from the current global provider."""
    return trace.get_tracer(__name__)


@contextmanager
def trace_span(
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL
):
    """
    Context manager for creating a trace span.

    Args:
        name: Name of the span
        attributes: Optional attributes to add to the span
        kind: Span kind (INTERNAL, SERVER, CLIENT, etc.)

    Example:
        with trace_span("db.select", {"db.sql.table": "tasks"}):
            cursor.execute(...)
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                if value is None:
                    continue
                if isinstance(value, (str, int, float, bool)):
                    span.set_attribute(key, value)
                else:
                    span.set_attribute(key, str(value))
        yield span


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current active span."""
    span = trace.get_current_span()
    if isinstance(value, (str, int, float, bool)):
        span.set_attribute(key, value)
    else:
        span.set_attribute(key, str(value))
