"""
OpenTelemetry distributed tracing configuration for the Shop Order API.

This module provides instrumentation for:
- FastAPI (HTTP requests/responses)
- SQLAlchemy (one span per SQL statement, which makes N+1 patterns visible
  in a trace view)

Configuration via environment variables:
- OTEL_ENABLED: Enable/disable tracing (default: false)
- OTEL_SERVICE_NAME: Service name for traces (default: shop-order-api)
- OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector endpoint (default: http://localhost:4317)
- OTEL_EXPORTER_OTLP_HEADERS: Optional headers for OTLP exporter
- OTEL_TRACES_SAMPLER: Sampling strategy (default: parent_trace_always)
- OTEL_TRACES_SAMPLER_ARG: Sampling rate (default: 1.0)
"""

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)

from shop.core.config import settings

logger = logging.getLogger(__name__)

# Global tracer provider reference for shutdown
_tracer_provider: TracerProvider | None = None


def _parse_headers(headers_string: str | None) -> dict[str, str]:
    """
    Parse OTLP headers from environment variable format.

    Args:
        headers_string: Headers in format "key1=value1,key2=value2"

    Returns:
        Dictionary of headers
    """
    if not headers_string:
        return {}

    headers = {}
    for pair in headers_string.split(","):
        pair = pair.strip()
        if "=" in pair:
            key, value = pair.split("=", 1)
            headers[key.strip()] = value.strip()
    return headers


def _build_sampler(sampler_name: str, sampler_arg: float) -> Sampler:
    if sampler_name == "always_on":
        return ALWAYS_ON
    if sampler_name == "always_off":
        return ALWAYS_OFF
    if sampler_name == "traceidratio":
        return TraceIdRatioBased(sampler_arg)
    # parent_trace_always (default)
    return ParentBased(root=TraceIdRatioBased(sampler_arg))


def init_telemetry() -> TracerProvider | None:
    """
    Initialize OpenTelemetry distributed tracing from settings.

    Returns:
        TracerProvider instance if enabled, None otherwise
    """
    global _tracer_provider

    if not settings.otel_enabled:
        logger.info("OpenTelemetry tracing is disabled (OTEL_ENABLED=false)")
        return None

    resource = Resource.create(
        {
            SERVICE_NAME: settings.otel_service_name,
            DEPLOYMENT_ENVIRONMENT: settings.app_env.value,
            "service.version": "0.1.0",
        }
    )
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=_build_sampler(settings.otel_traces_sampler, settings.otel_traces_sampler_arg),
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.otel_exporter_otlp_endpoint,
                headers=_parse_headers(settings.otel_exporter_otlp_headers),
            )
        )
    )
    trace.set_tracer_provider(tracer_provider)
    _tracer_provider = tracer_provider

    logger.info(
        "OpenTelemetry initialized: service=%s, endpoint=%s, sampler=%s",
        settings.otel_service_name,
        settings.otel_exporter_otlp_endpoint,
        settings.otel_traces_sampler,
    )
    return tracer_provider


def instrument_fastapi(app: Any) -> None:
    """Instrument FastAPI application with OpenTelemetry."""
    if not settings.otel_enabled:
        logger.debug("OpenTelemetry disabled - skipping FastAPI instrumentation")
        return

    FastAPIInstrumentor.instrument_app(app)
    logger.info("FastAPI instrumentation enabled")


def instrument_sqlalchemy(engine: Any) -> None:
    """Instrument a (sync) SQLAlchemy engine with OpenTelemetry."""
    if not settings.otel_enabled:
        logger.debug("OpenTelemetry disabled - skipping SQLAlchemy instrumentation")
        return

    SQLAlchemyInstrumentor().instrument(engine=engine, enable_commenter=True)
    logger.info("SQLAlchemy instrumentation enabled")


def shutdown_telemetry() -> None:
    """
    Shutdown OpenTelemetry tracer provider gracefully.

    Flushes all pending spans. Called on application shutdown.
    """
    global _tracer_provider

    if _tracer_provider is None:
        return

    logger.info("Shutting down OpenTelemetry tracer provider")
    _tracer_provider.shutdown()
    _tracer_provider = None


def _current_span_context() -> Any:
    current_span = trace.get_current_span()
    # NonRecordingSpan is used when no span is active
    if current_span is None or not current_span.is_recording():
        return None
    return current_span.get_span_context()


def get_trace_id() -> str | None:
    """Current trace ID as a hex string, or None if no span is recording."""
    span_context = _current_span_context()
    if span_context is None:
        return None
    return format(span_context.trace_id, "032x")


def get_span_id() -> str | None:
    """Current span ID as a hex string, or None if no span is recording."""
    span_context = _current_span_context()
    if span_context is None:
        return None
    return format(span_context.span_id, "016x")
