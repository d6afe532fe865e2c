"""OpenTelemetry tracing for the IoT WebSocket signer.

Spans cover presigning, endpoint discovery and connection resolution. Until
init_tracing() is called, the OpenTelemetry API hands out a no-op tracer, so
library users pay nothing unless they opt in.

Span attributes never carry secret material (secret keys, session tokens,
signatures or presigned URLs).
"""

import inspect
import os
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator, TypeVar, ParamSpec

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.trace import Status, StatusCode

# Type variables for decorator
P = ParamSpec("P")
T = TypeVar("T")

TRACER_NAME = "iot_websocket"

_initialized = False


def init_tracing(
    service_name: str = "iot-websocket-signer",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
) -> trace.Tracer:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
                      If None, uses OTEL_EXPORTER_OTLP_ENDPOINT env var
        enable_console_export: If True, also export spans to console (for debugging)

    Returns:
        Configured tracer instance
    """
    global _initialized

    if _initialized:
        return get_tracer()

    resource = Resource.create({
        SERVICE_NAME: service_name,
        "service.version": "0.1.0",
        "deployment.environment": os.getenv("ENVIRONMENT", "development"),
    })
    provider = TracerProvider(resource=resource)

    endpoint = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))

    if enable_console_export or os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _initialized = True

    return get_tracer()


def get_tracer() -> trace.Tracer:
    """Get the tracer for this package (no-op until a provider is installed)."""
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def _span(name: str, attributes: dict[str, Any] | None) -> Iterator[trace.Span]:
    """Open a span, mark it OK on exit and ERROR (with the exception) on failure."""
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        span.set_status(Status(StatusCode.OK))


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Wrap a sync or async function in a span named after it (or ``name``)."""
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__name__

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                with _span(span_name, attributes):
                    return await func(*args, **kwargs)  # type: ignore
            return async_wrapper  # type: ignore

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with _span(span_name, attributes):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator
