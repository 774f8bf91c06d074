"""
Pydantic models for the verification mailer.
"""

from mailer.models.email import VerificationEmail
from mailer.models.events import (
    SUCCESS_MESSAGE,
    InvocationResult,
    VerificationRequest,
)

__all__ = [
    "SUCCESS_MESSAGE",
    "InvocationResult",
    "VerificationEmail",
    "VerificationRequest",
]
