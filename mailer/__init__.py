# Shared Infrastructure for the Verification Mailer
"""
Shared infrastructure for the verification email Lambda.

This package provides:
- Configuration management
- Custom exceptions
- Pydantic models for notification payloads and results
- Logging setup
- Tools for Secrets Manager and SendGrid
"""

from mailer.config import Settings, get_settings
from mailer.exceptions import (
    CredentialUnavailableError,
    DeliveryFailedError,
    InvalidParametersError,
    MailerError,
    MalformedBatchError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "MailerError",
    "CredentialUnavailableError",
    "MalformedBatchError",
    "InvalidParametersError",
    "DeliveryFailedError",
]
