from __future__ import annotations

import contextlib
import os
import sys
from typing import Iterator, Optional

try:
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SpanExporter,
    )
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
except Exception:  # pragma: no cover - optional dependency resolution
    trace = None


SERVICE_NAME = "medportal.reminders"


def _span_exporter() -> "SpanExporter":
    # OTLP when a collector is configured, otherwise spans go to the console.
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        return OTLPSpanExporter(endpoint=endpoint)
    return ConsoleSpanExporter()


def init_observability(service_name: str = SERVICE_NAME) -> bool:
    """Install the process tracer provider once. Returns True when installed."""
    if trace is None or "pytest" in sys.modules:
        return False
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return False

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(_span_exporter()))
    trace.set_tracer_provider(provider)
    return True


@contextlib.contextmanager
def traced(span_name: str, **attributes: object) -> Iterator[Optional[object]]:
    """Span around a sweep or manual send; yields None without OpenTelemetry."""
    if trace is None:
        yield None
        return
    tracer = trace.get_tracer(SERVICE_NAME)
    with tracer.start_as_current_span(span_name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        yield span
