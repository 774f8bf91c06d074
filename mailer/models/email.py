"""
Email Models

Outbound verification message as sent to SendGrid.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VerificationEmail(BaseModel):
    """A rendered verification email ready for delivery."""

    model_config = ConfigDict(frozen=True)

    to: str = Field(..., description="Recipient address")
    from_address: str = Field(..., description="Sender address, noreply@<base_url>")
    subject: str = Field(..., description="Subject line")
    html: str = Field(..., description="HTML body")

    def to_sendgrid_payload(self) -> dict[str, Any]:
        """Build the SendGrid v3 mail/send request body."""
        return {
            "personalizations": [{"to": [{"email": self.to}]}],
            "from": {"email": self.from_address},
            "subject": self.subject,
            "content": [{"type": "text/html", "value": self.html}],
        }
