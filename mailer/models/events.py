"""
Event Models

Pydantic models for the inbound verification notification and the
Lambda invocation result.
"""

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_MESSAGE = "Verification email sent successfully"


class VerificationRequest(BaseModel):
    """
    Decoded payload of one notification record.

    Both fields are optional at parse time: a record with a missing email
    or token is still a well-formed record and is rejected at send time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    email: str | None = Field(default=None, description="Recipient email address")
    verification_token: str | None = Field(
        default=None,
        alias="verificationToken",
        description="Opaque token issued by the web application",
    )


class InvocationResult(BaseModel):
    """Externally observable outcome of one invocation."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="200 or 500")
    body: str = Field(..., description="Human-readable outcome")

    @classmethod
    def success(cls) -> "InvocationResult":
        return cls(status_code=200, body=SUCCESS_MESSAGE)

    @classmethod
    def failure(cls, message: str) -> "InvocationResult":
        return cls(status_code=500, body=message)

    def to_response(self) -> dict:
        """Convert to the Lambda response shape."""
        return {"statusCode": self.status_code, "body": self.body}
