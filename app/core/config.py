"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. DATABASE_URL for the postgres
backend, RESEND_API_KEY for the resend email backend) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required_backends (database_url for postgres, resend_api_key
    for the resend email backend).
    """

    # App
    app_name: str = "activity-tracker"
    app_version: str = "1.0.0"
    debug: bool = False
    # "development" additionally returns reset links in API responses.
    environment: str = "production"

    # Database: "postgres" (SQLAlchemy + Alembic) or "memory" (process-local, dev/tests)
    database_backend: str = "memory"
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"
    # Used to build links when the request carries no Origin header.
    public_app_url: str = "http://localhost:8080"

    # Tokens
    password_reset_ttl_seconds: int = 3600  # 1 hour
    invitation_ttl_seconds: int = 7 * 24 * 3600  # 7 days
    min_password_length: int = 6
    # Upper bound for verify + claim + effect of a single redemption.
    redemption_timeout_seconds: float = 10.0

    # Notifications: "log" (log only) or "resend" (Resend REST API)
    email_backend: str = "log"
    resend_api_key: SecretStr | None = None
    resend_api_url: str = "https://api.resend.com"
    verified_sender_email: str = "onboarding@resend.dev"
    email_app_name: str = "Activity Tracker"
    email_timeout_seconds: float = 15.0

    # Identity provider (GoTrue-compatible) used by the client session guard
    identity_provider_url: str = "http://localhost:9999"
    identity_provider_api_key: SecretStr | None = None

    # Session guard
    session_check_interval_seconds: float = 300.0  # 5 minutes
    session_refresh_threshold_seconds: float = 600.0  # 10 minutes
    session_min_check_interval_seconds: float = 30.0

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    max_request_size: int = 1024 * 1024  # 1MB

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required_backends(self) -> "Settings":
        """Validate database and email backend selection.

        - Postgres: DATABASE_URL required.
        - Memory: nothing required; state lives for the process lifetime.
        - Resend: RESEND_API_KEY required.
        """
        if self.database_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'postgres' or 'memory', got: {self.database_backend!r}"
            )
        if self.email_backend == "resend":
            has_key = self.resend_api_key and self.resend_api_key.get_secret_value()
            if not has_key:
                raise ValueError(
                    "RESEND_API_KEY is required when email_backend is 'resend'. "
                    "Set in environment or .env file."
                )
        elif self.email_backend != "log":
            raise ValueError(
                f"Invalid email_backend '{self.email_backend}'. "
                "Must be one of: 'log', 'resend'"
            )
        if self.min_password_length < 1:
            raise ValueError("min_password_length must be at least 1")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
