"""
Custom Exceptions for the Verification Mailer

All exceptions follow the pattern of specific, actionable errors
with context needed for debugging and logging.
"""

from dataclasses import dataclass
from typing import Any


class MailerError(Exception):
    """Base exception for the verification mailer."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


@dataclass
class CredentialUnavailableError(MailerError):
    """Provider credential could not be resolved from the secret store."""

    secret_name: str

    def __init__(
        self,
        secret_name: str,
        error_message: str | None = None,
    ) -> None:
        self.secret_name = secret_name
        super().__init__(
            f"Credential '{secret_name}' unavailable: {error_message or 'Unknown error'}",
            secret_name=secret_name,
            error_message=error_message,
        )


@dataclass
class MalformedBatchError(MailerError):
    """Inbound batch or one of its records could not be decoded."""

    record_index: int | None = None

    def __init__(
        self,
        error_message: str,
        record_index: int | None = None,
    ) -> None:
        self.record_index = record_index
        location = f" at record {record_index}" if record_index is not None else ""
        super().__init__(
            f"Malformed notification batch{location}: {error_message}",
            record_index=record_index,
        )


@dataclass
class InvalidParametersError(MailerError):
    """Required send parameters are missing or empty."""

    missing: list[str]

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required parameters: {', '.join(missing)}",
            missing=missing,
        )


@dataclass
class DeliveryFailedError(MailerError):
    """Email provider rejected or failed to accept the message."""

    recipient: str
    status_code: int | None = None

    def __init__(
        self,
        recipient: str,
        error_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.recipient = recipient
        self.status_code = status_code
        super().__init__(
            f"Email delivery failed for {recipient}: {error_message or 'Unknown error'}",
            recipient=recipient,
            status_code=status_code,
        )
