"""
Tests for OpenTelemetry distributed tracing configuration.

Tests cover:
- Header parsing for OTLP exporters
- Sampler selection
- Disabled telemetry is a no-op
- Trace ID and span ID extraction
"""

from unittest.mock import Mock, patch

from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON, ParentBased, TraceIdRatioBased

from shop.core.telemetry import (
    _build_sampler,
    _parse_headers,
    get_span_id,
    get_trace_id,
    init_telemetry,
    instrument_sqlalchemy,
    shutdown_telemetry,
)


class TestParseHeaders:
    def test_single_pair(self):
        assert _parse_headers("Authorization=Bearer token123") == {
            "Authorization": "Bearer token123"
        }

    def test_multiple_pairs_with_whitespace(self):
        assert _parse_headers(" key1 = value1 , key2=value2 ") == {
            "key1": "value1",
            "key2": "value2",
        }

    def test_value_containing_equals(self):
        assert _parse_headers("token=a=b") == {"token": "a=b"}

    def test_empty_and_malformed(self):
        assert _parse_headers(None) == {}
        assert _parse_headers("") == {}
        assert _parse_headers("no-separator") == {}


class TestBuildSampler:
    def test_named_samplers(self):
        assert _build_sampler("always_on", 1.0) is ALWAYS_ON
        assert _build_sampler("always_off", 1.0) is ALWAYS_OFF
        assert isinstance(_build_sampler("traceidratio", 0.5), TraceIdRatioBased)

    def test_default_is_parent_based(self):
        assert isinstance(_build_sampler("parent_trace_always", 1.0), ParentBased)


class TestDisabledTelemetry:
    def test_init_returns_none_when_disabled(self):
        with patch("shop.core.telemetry.settings") as mock_settings:
            mock_settings.otel_enabled = False
            assert init_telemetry() is None

    def test_instrument_sqlalchemy_skipped_when_disabled(self):
        with (
            patch("shop.core.telemetry.settings") as mock_settings,
            patch("shop.core.telemetry.SQLAlchemyInstrumentor") as instrumentor,
        ):
            mock_settings.otel_enabled = False
            instrument_sqlalchemy(Mock())

        instrumentor.assert_not_called()

    def test_shutdown_without_provider_is_noop(self):
        shutdown_telemetry()


class TestTraceContext:
    def test_no_ids_without_recording_span(self):
        assert get_trace_id() is None
        assert get_span_id() is None

    def test_ids_formatted_as_hex(self):
        span = Mock()
        span.is_recording.return_value = True
        span.get_span_context.return_value = Mock(trace_id=0x1F, span_id=0x2A)

        with patch("shop.core.telemetry.trace.get_current_span", return_value=span):
            assert get_trace_id() == f"{0x1F:032x}"
            assert get_span_id() == f"{0x2A:016x}"
