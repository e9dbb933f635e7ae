"""
Observability module for the Shop Order API.

Provides:
- Structured logging with JSON format and correlation IDs
- Request correlation ID (request_id) generation and propagation
- Per-request SQL statement counts (logged and returned as X-Query-Count)
- Prometheus metrics collection (HTTP, repository operations)
- Request tracking middleware for latency and status codes

Usage:
    from shop.core.observability import (
        get_request_id,
        set_correlation_id,
        db_metrics,
        metrics,
    )
"""

import json
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from shop.core.query_stats import track_queries

QUERY_COUNT_HEADER = "X-Query-Count"

# ============================================================================
# Context Variables for Request Tracking
# ============================================================================

# Correlation ID - links all logs for a single request
_request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_ctx.get()


def set_correlation_id(request_id: str) -> None:
    """Set the correlation ID for the current request context."""
    _request_id_ctx.set(request_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level
    - logger: Logger name
    - message: Log message
    - request_id: Correlation ID (if available)
    - trace_id / span_id: OpenTelemetry context (if a span is recording)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        try:
            from shop.core.telemetry import get_span_id, get_trace_id

            trace_id = get_trace_id()
            if trace_id:
                log_entry["trace_id"] = trace_id
            span_id = get_span_id()
            if span_id:
                log_entry["span_id"] = span_id
        except ImportError:
            # OpenTelemetry not available
            pass

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # These come from logger.info("msg", extra={"key": "value"})
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with other Prometheus metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection for the application.

    Metrics groups:
    - HTTP: Request rate, errors, latency, statements per request
    - Repository: operation timing and outcome
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # HTTP Metrics
        # -------------------------------------------------------------------

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )

        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "route"],
            registry=self.registry,
        )

        self.http_errors_total = Counter(
            "http_errors_total",
            "Total HTTP errors",
            ["error_type", "method", "route"],
            registry=self.registry,
        )

        # Statements issued per request; the number each strategy is judged by
        self.sql_statements_per_request = Histogram(
            "sql_statements_per_request",
            "SQL statements issued while handling one request",
            ["route"],
            buckets=(0, 1, 2, 3, 5, 10, 25, 50, 100, 250),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Repository Metrics
        # -------------------------------------------------------------------

        self.db_query_duration_seconds = Histogram(
            "db_query_duration_seconds",
            "Repository operation duration in seconds",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry,
        )

        self.db_queries_total = Counter(
            "db_queries_total",
            "Total repository operations",
            ["operation", "status"],
            registry=self.registry,
        )

        self.db_statements_total = Counter(
            "db_statements_total",
            "SQL statements issued by repository operations",
            ["operation"],
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


# ============================================================================
# Middleware
# ============================================================================


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds observability to all requests.

    Features:
    - Generates and propagates request_id (correlation ID)
    - Counts SQL statements issued by the request
    - Logs all requests with structured fields
    - Records Prometheus metrics
    - Adds X-Request-ID and X-Query-Count to response headers
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        """
        Initialize observability middleware.

        Args:
            app: ASGI application
            metrics_instance: Metrics instance (uses global if None)
            skip_paths: Paths to skip request logging (e.g., health checks)
            request_id_header: Header carrying the correlation ID
        """
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = tuple(skip_paths or ["/api/health", "/api/readyz", "/metrics"])
        self.request_id_header = request_id_header

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.request_id_header) or generate_request_id()
        set_correlation_id(request_id)

        route_pattern = request.url.path
        is_skipped_path = route_pattern.startswith(self.skip_paths)

        self.metrics.http_requests_in_progress.labels(
            method=request.method, route=route_pattern
        ).inc()

        start_time = time.time()

        with track_queries() as counter:
            try:
                response = await call_next(request)
            except Exception as e:
                latency_ms = (time.time() - start_time) * 1000
                error_type = type(e).__name__
                self.metrics.http_requests_total.labels(
                    method=request.method, route=route_pattern, status_code=500
                ).inc()
                self.metrics.http_errors_total.labels(
                    error_type=error_type, method=request.method, route=route_pattern
                ).inc()
                self.metrics.http_request_duration_seconds.labels(
                    method=request.method, route=route_pattern
                ).observe(latency_ms / 1000)

                logging.getLogger("shop.request").error(
                    f"{request.method} {route_pattern} - {error_type}: {e}",
                    extra={
                        "method": request.method,
                        "route": route_pattern,
                        "status_code": 500,
                        "latency_ms": round(latency_ms, 2),
                        "query_count": counter.count,
                        "error_type": error_type,
                    },
                    exc_info=True,
                )
                raise
            finally:
                self.metrics.http_requests_in_progress.labels(
                    method=request.method, route=route_pattern
                ).dec()

        latency_ms = (time.time() - start_time) * 1000

        self.metrics.http_requests_total.labels(
            method=request.method,
            route=route_pattern,
            status_code=response.status_code,
        ).inc()
        self.metrics.http_request_duration_seconds.labels(
            method=request.method, route=route_pattern
        ).observe(latency_ms / 1000)
        self.metrics.sql_statements_per_request.labels(route=route_pattern).observe(
            counter.count
        )

        response.headers[self.request_id_header] = request_id
        response.headers[QUERY_COUNT_HEADER] = str(counter.count)

        if not is_skipped_path:
            logging.getLogger("shop.request").info(
                f"{request.method} {route_pattern}",
                extra={
                    "method": request.method,
                    "route": route_pattern,
                    "status_code": response.status_code,
                    "latency_ms": round(latency_ms, 2),
                    "query_count": counter.count,
                },
            )

        return response


# ============================================================================
# Repository Metrics Helper
# ============================================================================


class DBMetricsWrapper:
    """
    Tracks timing, outcome and statement count of repository operations.

    Usage in repos:
        with db_metrics.track("find_all_with_items") as op:
            result = await db.execute(stmt)
        logger.debug("%d statements", op.statements)
    """

    def __init__(self, metrics_instance: Metrics | None = None) -> None:
        self.metrics = metrics_instance or metrics

    @contextmanager
    def track(self, operation: str) -> Iterator["_Operation"]:
        start = time.time()
        status = "success"
        op = _Operation(operation)

        with track_queries() as counter:
            try:
                yield op
            except Exception:
                status = "error"
                raise
            finally:
                op.statements = counter.count
                self.metrics.db_query_duration_seconds.labels(operation=operation).observe(
                    time.time() - start
                )
                self.metrics.db_queries_total.labels(operation=operation, status=status).inc()
                self.metrics.db_statements_total.labels(operation=operation).inc(counter.count)


class _Operation:
    def __init__(self, name: str) -> None:
        self.name = name
        self.statements = 0


# Global DB metrics wrapper
db_metrics = DBMetricsWrapper()


# ============================================================================
# Metrics Endpoint
# ============================================================================


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


def extract_request_context(request: Request) -> dict[str, Any]:
    """
    Extract observability context from request for logging.

    Args:
        request: FastAPI Request object

    Returns:
        Dictionary with request_id and method
    """
    return {
        "request_id": get_request_id(),
        "method": request.method,
    }
