"""
Distributed tracing for todocore using OpenTelemetry.

Provides:
- Tracer provider setup with OTLP and console exporters
- SQLite3 driver instrumentation
- Span helpers used around storage operations
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.sqlite3 import SQLite3Instrumentor

from todocore import __version__
from todocore.config import Settings

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None


def setup_tracing(settings: Settings) -> bool:
    """
    Initialize OpenTelemetry tracing.

    Does nothing unless settings.tracing_enabled is set. Without setup the
    global no-op provider stays in place and trace_span() records nothing.

    The provider is process-wide. Later calls reuse it and return False.

    Returns:
        True if a tracer provider was installed by this call
    """
    global _provider

    if not settings.tracing_enabled:
        return False
    if _provider is not None:
        logger.debug("Tracing already initialized, reusing provider")
        return False

    logger.info(
        "Initializing OpenTelemetry tracing",
        extra={
            "service_name": settings.service_name,
            "otlp_endpoint": settings.otlp_endpoint,
            "enable_console": settings.console_exporter_enabled,
        }
    )

    resource = Resource.create({
        "service.name": settings.service_name,
        "service.version": __version__,
    })
    provider = TracerProvider(resource=resource)

    if settings.otlp_endpoint:
        try:
            otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True)
            provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            logger.info("OTLP exporter configured", extra={"endpoint": settings.otlp_endpoint})
        except Exception:
            logger.warning("Failed to configure OTLP exporter", exc_info=True)

    if settings.console_exporter_enabled:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console exporter enabled")

    trace.set_tracer_provider(provider)
    _provider = provider
    instrument_database()

    logger.info("OpenTelemetry tracing initialized successfully")
    return True


def flush_tracing() -> None:
    """Export any spans still buffered in the installed provider."""
    if _provider is None:
        return
    _provider.force_flush()


def shutdown_tracing() -> None:
    """
    Flush and shut down the installed provider at process exit.

    OpenTelemetry refuses to replace a global provider once set, so the
    provider stays registered here and setup_tracing() will not build
    another one. Spans started afterwards are dropped.
    """
    if _provider is None:
        return
    _provider.shutdown()


def instrument_database() -> None:
    """Instrument sqlite3 connections with OpenTelemetry."""
    instrumentor = SQLite3Instrumentor()
    if instrumentor.is_instrumented_by_opentelemetry:
        return
    try:
        instrumentor.instrument()
        logger.info("SQLite3 instrumentation enabled")
    except Exception:
        logger.error("Failed to instrument SQLite3", exc_info=True)


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

    Example:
        with trace_span("db.insert", {"db.sql.table": "todos"}):
            gateway.insert(record)
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name, kind=kind, record_exception=False) as span:
        if attributes:
            for key, value in attributes.items():
                if value is None:
                    continue
                if isinstance(value, (str, int, float, bool)):
                    span.set_attribute(key, value)
                else:
                    span.set_attribute(key, str(value))

        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current active span."""
    span = trace.get_current_span()
    if isinstance(value, (str, int, float, bool)):
        span.set_attribute(key, value)
    else:
        span.set_attribute(key, str(value))
