"""OpenTelemetry tracing support for the GitHub Operator."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, SpanKind, Tracer

logger = logging.getLogger(__name__)

# Global tracer instance, None while tracing is off
_tracer: Tracer | None = None


def initialize_tracing(service_name: str = "github-operator") -> None:
    """Initialize OpenTelemetry tracing.

    Tracing is opt-in. Spans are exported over OTLP gRPC.

    Args:
        service_name: Name of the service for tracing

    Environment Variables:
        OTEL_TRACES_ENABLED: Set to "true" to enable tracing (default: off)
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint URL (default: http://localhost:4317)
        OTEL_SERVICE_NAME: Service name (default: github-operator)
    """
    global _tracer

    if os.getenv("OTEL_TRACES_ENABLED", "false").lower() != "true":
        logger.debug("Tracing disabled")
        return

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    try:
        provider = TracerProvider(
            resource=Resource.create({
                "service.name": os.getenv("OTEL_SERVICE_NAME", service_name),
                "service.version": os.getenv("OTEL_SERVICE_VERSION", "unknown"),
            })
        )
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)
        _tracer = trace.get_tracer("github_operator")
    except Exception as e:
        # The operator keeps running without traces
        logger.warning(f"Failed to initialize tracing against {endpoint}: {e}")
        return

    logger.info(f"Tracing enabled, exporting to {endpoint}")


def get_tracer() -> Tracer | None:
    """Return the operator tracer, or None if tracing is off."""
    return _tracer


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
    span_kind: SpanKind = SpanKind.INTERNAL,
) -> Iterator[Span | None]:
    """Context manager for creating a trace span.

    Args:
        name: Name of the span
        kind: Custom resource kind ("Repository" or "Key")
        attributes: Additional span attributes
        span_kind: OpenTelemetry span kind

    Yields:
        Span object or None if tracing is off
    """
    tracer = get_tracer()
    if tracer is None:
        yield None
        return

    attrs = dict(attributes or {})
    if kind:
        attrs["k8s.resource.kind"] = kind

    with tracer.start_as_current_span(name, kind=span_kind, attributes=attrs) as span:
        try:
            yield span
        except Exception as e:
            if span.is_recording():
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise


def reconcile_span(kind: str, body: dict[str, Any]) -> Any:
    """Span covering one reconcile pass of a custom resource."""
    meta = body.get("metadata", {})
    return trace_span(
        f"reconcile_{kind.lower()}",
        kind=kind,
        attributes={
            "k8s.namespace.name": meta.get("namespace", ""),
            "k8s.resource.name": meta.get("name", ""),
        },
    )


def forge_span(operation: str, method: str, path: str) -> Any:
    """Client span covering one forge REST call."""
    return trace_span(
        f"github.{operation}",
        attributes={"http.request.method": method, "url.path": path},
        span_kind=SpanKind.CLIENT,
    )
