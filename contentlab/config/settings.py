"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
External services are optional at load time; the component that needs a missing
value raises ConfigurationError when it is first used.

Production Mode:
    When app_env="production", additional validations apply:
    - api_key_enabled must be True
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Supabase (Content Library, Webhook Configs)
    # -------------------------------------------------------------------------
    supabase_url: str | None = Field(default=None, description="Supabase project URL")
    supabase_key: SecretStr | None = Field(
        default=None, description="Supabase anon or service key"
    )

    # -------------------------------------------------------------------------
    # OpenAI (Content Suggestions)
    # -------------------------------------------------------------------------
    openai_api_key: SecretStr | None = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(
        default="gpt-4o",
        description="Chat model used for content suggestions",
    )
    openai_max_tokens: int = Field(
        default=2000,
        description="Maximum completion tokens for content suggestions",
    )

    # -------------------------------------------------------------------------
    # SEMrush (Keyword Data)
    # -------------------------------------------------------------------------
    semrush_api_key: SecretStr | None = Field(default=None, description="SEMrush API key")
    semrush_database: str = Field(
        default="us",
        description="SEMrush regional database",
    )

    # -------------------------------------------------------------------------
    # n8n Webhooks
    # -------------------------------------------------------------------------
    keyword_webhook_url: str | None = Field(
        default=None, description="Webhook for keyword sync/analysis workflows"
    )
    content_webhook_url: str | None = Field(
        default=None, description="Webhook for content suggestion workflows"
    )
    custom_keywords_webhook_url: str | None = Field(
        default=None, description="Webhook for custom keyword workflows"
    )
    content_adjustment_webhook_url: str | None = Field(
        default=None, description="Webhook for content adjustment workflows"
    )
    webhook_timeout_seconds: float = Field(
        default=180.0,
        description="Client-side timeout for webhook calls (default 3 minutes)",
    )
    webhook_allowed_hosts: list[str] = Field(
        default_factory=list,
        description=(
            "Hosts that one-off webhook URLs may target besides the configured "
            "webhooks, as a JSON list (e.g. [\"n8n.example.com\"])"
        ),
    )
    webhook_source: str = Field(
        default="contentlab",
        description="Value sent as 'source' in every webhook payload",
    )

    # -------------------------------------------------------------------------
    # Content Library
    # -------------------------------------------------------------------------
    library_cache_ttl_seconds: int = Field(
        default=300,
        description="TTL for cached library listings (default 5 minutes)",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=8000, description="API bind port")

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    api_key: SecretStr | None = Field(
        default=None,
        description="API key for authentication. If set, all requests require X-API-Key header.",
    )
    api_key_enabled: bool = Field(
        default=False,
        description="Enable API key authentication. Set True for production.",
    )
    metrics_require_api_key: bool = Field(
        default=False,
        description="Require X-API-Key on /metrics as well. When False, /metrics is public.",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are secure."""
        if self.app_env == "production":
            errors = []

            if not self.api_key_enabled:
                errors.append("api_key_enabled must be True in production")

            if self.api_key_enabled and not self.api_key:
                errors.append("api_key must be set when api_key_enabled is True")

            if self.debug:
                errors.append("debug must be False in production")

            if "*" in self.cors_allowed_origins:
                errors.append("cors_allowed_origins cannot contain '*' in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()
