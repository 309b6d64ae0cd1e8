"""Application configuration (settings and environment).

Single source of truth for process-wide configuration. Uses pydantic-settings
with .env support. Per-tenant settings live on the tenant row and are loaded
into TenantConfig (app.domain.entities.tenant) once per operation.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENTS = ("development", "staging", "production")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    database_url is optional so the app can boot (health checks, docs) without
    a database; SQL-backed routes raise SqlNotConfiguredException until it is set.
    """

    # App
    app_name: str = "crm-workflows"
    app_version: str = "1.0.0"
    debug: bool = False
    # "development" disables cron authentication (local runs only).
    environment: str = "production"

    # Database (PostgreSQL via asyncpg; schema managed by Alembic)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Tenant resolution
    tenant_header_name: str = "X-Tenant-ID"
    user_header_name: str = "X-User-ID"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # Scheduler endpoint: provider header (e.g. Vercel Cron) or Authorization: Bearer <secret>.
    cron_secret: SecretStr | None = None
    cron_secret_header_name: str = "x-vercel-cron-secret"

    # Workflow engine
    workflow_default_timezone: str = "UTC"
    # When True, a run where every action failed releases its dedup slot so the next tick retries.
    workflow_retry_failed_runs: bool = False
    workflow_tenant_batch_size: int = 500

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @model_validator(mode="after")
    def validate_environment(self) -> "Settings":
        """Validate environment name, timezone and numeric bounds."""
        if self.environment not in _ENVIRONMENTS:
            raise ValueError(
                f"environment must be one of {', '.join(_ENVIRONMENTS)}, got: {self.environment!r}"
            )
        if self.workflow_tenant_batch_size < 1:
            raise ValueError("workflow_tenant_batch_size must be >= 1")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("telemetry_sample_rate must be between 0.0 and 1.0")
        from app.shared.utils.datetime import is_valid_timezone

        if not is_valid_timezone(self.workflow_default_timezone):
            raise ValueError(
                f"workflow_default_timezone is not a known IANA timezone: {self.workflow_default_timezone!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
