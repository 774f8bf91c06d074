"""
Collaborator tools: secret resolution and email delivery.
"""

from mailer.tools.email import (
    build_verification_email,
    build_verification_link,
    send_verification_email,
)
from mailer.tools.secrets import fetch_sendgrid_api_key, resolve_sendgrid_api_key

__all__ = [
    "build_verification_email",
    "build_verification_link",
    "send_verification_email",
    "fetch_sendgrid_api_key",
    "resolve_sendgrid_api_key",
]
