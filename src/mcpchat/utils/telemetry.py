"""Tracing for mcp-chat.

Spans cover the model stream (``model.stream``), each tool round
(``assistant.tools``), individual tool executions (``tool.execute``) and the
MCP connect and call requests.  They go through the OpenTelemetry API only,
so they are no-ops until :func:`configure_telemetry` installs an SDK
provider (``pip install mcp-chat[otel]``, enabled by ``mcpchat chat
--telemetry``).
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

ATTR_MODEL = "mcpchat.model"
ATTR_PROVIDER = "mcpchat.provider"
ATTR_FINISH_REASON = "mcpchat.finish_reason"
ATTR_TOOL_CALLS = "mcpchat.tool_calls"
ATTR_TOOL_NAME = "mcpchat.tool.name"
ATTR_MCP_SERVER = "mcpchat.mcp.server"
ATTR_MCP_TOOL_COUNT = "mcpchat.mcp.tool_count"

_INSTRUMENTATION_NAME = "mcpchat"

OTLP_ENDPOINT_ENV = "OTEL_EXPORTER_OTLP_ENDPOINT"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


@contextmanager
def open_span(
    tracer: trace.Tracer, name: str, attributes: dict[str, Any] | None = None
) -> Iterator[trace.Span]:
    """Start a span that is never made the current span.

    For async generators: a span attached to the context across a ``yield``
    cannot be detached once the consumer abandons the stream, because the
    generator is then finalised in another context.  Wrap non-yielding work
    in ``trace.use_span(span)`` to parent child spans.  Exceptions are
    recorded on the span and re-raised.
    """
    span = tracer.start_span(name, attributes=attributes)
    try:
        yield span
    except Exception as exc:
        span.record_exception(exc)
        span.set_status(Status(StatusCode.ERROR, str(exc)))
        raise
    finally:
        span.end()


def configure_telemetry(*, service_name: str = "mcp-chat", otlp_endpoint: str | None = None) -> None:
    """Install an SDK tracer provider.

    Spans go to the OTLP/gRPC collector at *otlp_endpoint* (default
    ``$OTEL_EXPORTER_OTLP_ENDPOINT``) or, when none is set, to stdout.

    Raises:
        ImportError: If the ``otel`` extra is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for --telemetry. Install it with: pip install mcp-chat[otel]"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]

    endpoint = otlp_endpoint or os.environ.get(OTLP_ENDPOINT_ENV)
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(endpoint)))  # pyright: ignore[reportUnknownMemberType]
    else:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))  # pyright: ignore[reportUnknownMemberType]

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install mcp-chat[otel]"
        )
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
