"""
Configuration Management

Pydantic-settings based configuration for the verification mailer.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with VERIFICATION_ and are case-insensitive.
    Example: VERIFICATION_SECRET_NAME=prod/sendgrid

    base_url and sendgrid_api_key also accept the unprefixed BASE_URL and
    SENDGRID_API_KEY variables used by existing deployments.
    """

    model_config = SettingsConfigDict(
        env_prefix="VERIFICATION_",
        env_file=[".env.local", ".env"],  # Try .env.local first
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Link Configuration
    base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("VERIFICATION_BASE_URL", "BASE_URL", "base_url"),
        description="Host used for verification links and the sender domain",
    )

    # Credential Configuration
    sendgrid_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "VERIFICATION_SENDGRID_API_KEY", "SENDGRID_API_KEY", "sendgrid_api_key"
        ),
        description="SendGrid API key (skips Secrets Manager when set)",
    )
    secret_name: str = Field(
        default="sendgrid-api-key",
        description="Secrets Manager secret holding the SendGrid API key",
    )
    secret_key_field: str = Field(
        default="SENDGRID_API_KEY",
        description="JSON field of the SecretString that holds the key",
    )
    secretsmanager_endpoint_url: str | None = Field(
        default=None,
        description="Secrets Manager endpoint URL (for local development)",
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region",
    )

    # SendGrid Configuration
    sendgrid_api_url: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        description="SendGrid v3 mail send endpoint",
    )
    sendgrid_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for a single SendGrid request",
    )

    # Retry Configuration
    send_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Total send attempts per recipient (1 disables retry)",
    )
    send_retry_multiplier_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Backoff multiplier between send attempts",
    )
    send_retry_max_wait_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Upper bound on a single backoff wait",
    )

    # Template Configuration
    email_subject: str = Field(
        default="Verify Your Email",
        description="Subject line of the verification email",
    )
    email_signature: str = Field(
        default="The Webapp Team",
        description="Sign-off printed at the end of the email body",
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file_path: str | None = Field(
        default="/tmp/email_service.log",
        description="Local log file (empty disables the file sink)",
    )

    @property
    def secretsmanager_config(self) -> dict:
        """Secrets Manager client configuration."""
        config = {"region_name": self.aws_region}
        if self.secretsmanager_endpoint_url:
            config["endpoint_url"] = self.secretsmanager_endpoint_url
        return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are loaded only once.
    Call get_settings.cache_clear() in tests after changing the environment.
    """
    return Settings()
