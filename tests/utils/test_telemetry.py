"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from mcpchat.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_MCP_SERVER,
    ATTR_MODEL,
    ATTR_TOOL_NAME,
    OTLP_ENDPOINT_ENV,
    configure_telemetry,
    get_tracer,
    open_span,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, "calculator")


class TestOpenSpan:
    def test_span_not_made_current(self) -> None:
        tracer = MagicMock()
        before = trace.get_current_span()
        with open_span(tracer, "model.stream", {ATTR_MODEL: "gpt-4o"}) as span:
            assert trace.get_current_span() is before
            assert span is tracer.start_span.return_value

        tracer.start_span.assert_called_once_with("model.stream", attributes={ATTR_MODEL: "gpt-4o"})
        span.end.assert_called_once()

    def test_exception_recorded(self) -> None:
        tracer = MagicMock()
        with pytest.raises(ValueError, match="bad chunk"):
            with open_span(tracer, "model.stream"):
                raise ValueError("bad chunk")

        span = tracer.start_span.return_value
        span.record_exception.assert_called_once()
        span.set_status.assert_called_once()
        span.end.assert_called_once()

    async def test_abandoned_generator_ends_span(self) -> None:
        tracer = MagicMock()

        async def produce() -> AsyncGenerator[int, None]:
            with open_span(tracer, "assistant.tools"):
                yield 1
                yield 2

        gen = produce()
        assert await anext(gen) == 1
        await gen.aclose()

        span = tracer.start_span.return_value
        span.end.assert_called_once()
        span.record_exception.assert_not_called()


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="mcp-chat\\[otel\\]"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")

    def test_endpoint_read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        monkeypatch.setenv(OTLP_ENDPOINT_ENV, "http://collector:4317")
        with patch("mcpchat.utils.telemetry._otlp_exporter", side_effect=ImportError("no exporter")) as exporter:
            with pytest.raises(ImportError, match="no exporter"):
                configure_telemetry()
        exporter.assert_called_once_with("http://collector:4317")


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        for attr in (ATTR_MODEL, ATTR_TOOL_NAME, ATTR_MCP_SERVER):
            assert attr.startswith(f"{_INSTRUMENTATION_NAME}.")
