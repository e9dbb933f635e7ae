import hmac
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shop.api.routes.health import router as health_router
from shop.api.routes.orders import router as orders_router
from shop.api.routes.simple_orders import router as simple_orders_router
from shop.core.config import AppEnvironment, settings
from shop.core.db import create_schema, reset_async_engine
from shop.core.errors import ShopError, get_status_code
from shop.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)
from shop.core.telemetry import init_telemetry, instrument_fastapi, shutdown_telemetry

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

_SENSITIVE_PATTERNS = [
    r"[/\\][\w/-]+\.py",  # File paths
    r"SELECT.*FROM",  # SQL queries
    r"table\s*[:=]\s*\w+",  # Table references
]


def _sanitize_error_details(details: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize error details to prevent information leakage in production.

    Removes file paths, SQL statements and table references.

    Args:
        details: Original error details dictionary

    Returns:
        Sanitized details dictionary
    """
    if settings.app_env != AppEnvironment.PROD:
        return details

    sanitized: dict[str, Any] = {}
    for key, value in details.items():
        if isinstance(value, str):
            if any(re.search(p, value, re.IGNORECASE | re.DOTALL) for p in _SENSITIVE_PATTERNS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        elif isinstance(value, dict):
            sanitized[key] = _sanitize_error_details(value)
        else:
            sanitized[key] = value

    return sanitized


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: tracing and optional schema bootstrap. Shutdown: flush spans, dispose engine."""
    init_telemetry()
    instrument_fastapi(app)
    if settings.db_create_schema:
        await create_schema()
    yield
    shutdown_telemetry()
    await reset_async_engine()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - OpenTelemetry distributed tracing
    - Structured logging with correlation IDs and per-request statement counts
    - CORS middleware
    - Exception handlers for domain errors
    - API routers
    - Metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title="Shop Order API",
        description="Order listings served with different ORM query strategies",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ============================================================================
    # Middleware
    # ============================================================================

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware,
            request_id_header=settings.observability_request_id_header,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=[settings.observability_request_id_header, "X-Query-Count"],
    )

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
        """
        Handle domain-specific errors.

        Maps domain exceptions to HTTP status codes and returns structured
        error responses.
        """
        status_code = get_status_code(exc)

        context = {
            "details": exc.details,
            "path": request.url.path,
            **extract_request_context(request),
        }

        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        else:
            logger.warning(f"{exc.__class__.__name__}: {exc.message}", extra=context)

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": _sanitize_error_details(exc.details),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Consistent error envelope for HTTP exceptions."""
        if exc.status_code >= 500:
            logger.error(
                f"HTTP {exc.status_code}: {exc.detail}",
                extra={"path": request.url.path, **extract_request_context(request)},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTPException",
                "message": exc.detail,
                "details": {},
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all handler for unexpected exceptions.

        Logs the full exception and returns a generic 500 error to the client
        without exposing internal implementation details.
        """
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path, **extract_request_context(request)},
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(simple_orders_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus) - Token Protected
    # ============================================================================

    async def protected_metrics(request: Request) -> Response:
        """
        Protected Prometheus metrics endpoint.

        Requires the X-Metrics-Token header to match METRICS_TOKEN.
        """
        expected_token = settings.metrics_token
        if not expected_token:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
            )

        metrics_token = request.headers.get("X-Metrics-Token")
        if not hmac.compare_digest(metrics_token or "", expected_token):
            logger.warning("Unauthorized metrics access attempt")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid metrics token",
            )

        return metrics_endpoint()

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
