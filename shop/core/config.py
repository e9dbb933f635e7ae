"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Point `ENV_FILE` at a
local env file to load one during development.
"""

import os
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Query options meant for create_engine(), not for the DBAPI connect() call.
ENGINE_ONLY_URL_OPTIONS = frozenset({"pool_size", "max_overflow", "pool_timeout", "pool_recycle"})


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


def _strip_engine_options(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [(k, v) for k, v in parse_qsl(parts.query) if k not in ENGINE_ONLY_URL_OPTIONS]
    return urlunsplit(parts._replace(query=urlencode(query)))


def _is_postgres(url: str) -> bool:
    scheme = url.split("://", 1)[0]
    return scheme in ("postgresql", "postgres") or scheme.startswith("postgresql+")


def _replace_scheme(url: str, scheme: str) -> str:
    _, _, rest = url.partition("://")
    return f"{scheme}://{rest}"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "shop-order-api"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # OpenTelemetry Configuration
    otel_enabled: bool = False
    otel_service_name: str = "shop-order-api"
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_exporter_otlp_headers: str | None = None
    otel_traces_sampler: str = "parent_trace_always"
    otel_traces_sampler_arg: float = 1.0

    # Database
    database_url_app: str
    db_echo: bool = False
    # Create tables on startup. Local development only; there are no migrations.
    db_create_schema: bool = False

    # Number of parent ids resolved per follow-up query when a collection
    # is loaded in batches (/api/v3.1/orders).
    batch_fetch_size: int = Field(default=100, ge=1)

    # Token for protecting /metrics endpoint
    metrics_token: str | None = None

    # Token for protecting /health and /readyz endpoints (optional)
    health_token: str | None = None

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def async_url(self) -> str:
        """
        Database URL for the async engine.

        PostgreSQL URLs are switched to the asyncpg driver and SQLite URLs to
        aiosqlite. Engine-only options such as pool_size are removed because
        the driver would reject them as connect() arguments.
        """
        url = _strip_engine_options(self.database_url_app)
        if _is_postgres(url):
            return _replace_scheme(url, "postgresql+asyncpg")
        scheme = url.split("://", 1)[0]
        if scheme == "sqlite" or scheme.startswith("sqlite+"):
            return _replace_scheme(url, "sqlite+aiosqlite")
        return url

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("database_url_app")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or "://" not in v:
            raise ValueError("DATABASE_URL_APP must be a database URL")
        return v.strip()

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent local-only configurations from being deployed.
        """
        if self.app_env == AppEnvironment.PROD:
            if not _is_postgres(self.database_url_app):
                raise ValueError("DATABASE_URL_APP must use PostgreSQL in production")

            if self.db_create_schema:
                raise ValueError("DB_CREATE_SCHEMA is not allowed in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
