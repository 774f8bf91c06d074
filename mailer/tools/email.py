"""
Email Tools

Verification link rendering and SendGrid delivery over its v3 HTTP API.
The API key is always passed in by the caller; nothing here holds
credential state between calls.
"""

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from mailer.config import Settings, get_settings
from mailer.exceptions import DeliveryFailedError, InvalidParametersError
from mailer.models.email import VerificationEmail

log = structlog.get_logger()

VERIFICATION_LINK_SCHEME = "https"
VERIFICATION_PATH = "/user/v1/user/self/verify"
LINK_EXPIRY_MINUTES = 2

HTML_TEMPLATE = (
    "<p>Dear User,<br>"
    'Please verify your email by <a href="{link}">clicking here</a>. '
    "This link expires in {expiry} minutes.<br><br>"
    "Thanks,<br>{signature}</p>"
)


def build_verification_link(base_url: str, verification_token: str) -> str:
    """
    Build the link the recipient clicks to verify their address.

    Format: https://{base_url}/user/v1/user/self/verify?token={token}
    """
    token = quote(verification_token, safe="")
    return f"{VERIFICATION_LINK_SCHEME}://{base_url}{VERIFICATION_PATH}?token={token}"


def build_sender_address(base_url: str) -> str:
    """Sender is always noreply@<base_url>."""
    return f"noreply@{base_url}"


def _validate_parameters(
    email: str | None,
    verification_token: str | None,
    base_url: str | None,
) -> None:
    params = {
        "email": email,
        "verification_token": verification_token,
        "base_url": base_url,
    }
    missing = [
        name
        for name, value in params.items()
        if not isinstance(value, str) or not value.strip()
    ]
    if missing:
        raise InvalidParametersError(missing=missing)


def build_verification_email(
    email: str | None,
    verification_token: str | None,
    base_url: str | None,
    *,
    settings: Settings | None = None,
) -> VerificationEmail:
    """
    Render the verification email for one recipient.

    The expiry stated in the body is informational only; the token issuer
    is responsible for enforcing it.

    Raises:
        InvalidParametersError: If any argument is missing or blank
    """
    _validate_parameters(email, verification_token, base_url)
    settings = settings or get_settings()

    link = build_verification_link(base_url, verification_token)
    log.info("verification_link_created", email=email, base_url=base_url)
    log.debug("verification_link", link=link)

    message = VerificationEmail(
        to=email,
        from_address=build_sender_address(base_url),
        subject=settings.email_subject,
        html=HTML_TEMPLATE.format(
            link=link,
            expiry=LINK_EXPIRY_MINUTES,
            signature=settings.email_signature,
        ),
    )
    log.info("verification_email_prepared", to=message.to, from_address=message.from_address)
    return message


def _is_retryable(exc: BaseException) -> bool:
    """Transport errors, throttling and provider-side failures are retried."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.TransportError)


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception()
    log.warning(
        "sendgrid_send_retrying",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def _post_message(
    client: httpx.Client,
    url: str,
    api_key: str,
    message: VerificationEmail,
) -> httpx.Response:
    response = client.post(
        url,
        json=message.to_sendgrid_payload(),
        headers={"Authorization": f"Bearer {api_key}"},
    )
    response.raise_for_status()
    return response


def _deliver(
    client: httpx.Client,
    api_key: str,
    message: VerificationEmail,
    settings: Settings,
) -> httpx.Response:
    retryer = Retrying(
        stop=stop_after_attempt(settings.send_max_attempts),
        wait=wait_random_exponential(
            multiplier=settings.send_retry_multiplier_seconds,
            max=settings.send_retry_max_wait_seconds,
        ),
        retry=retry_if_exception(_is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )

    try:
        return retryer(_post_message, client, settings.sendgrid_api_url, api_key, message)
    except httpx.HTTPStatusError as e:
        raise DeliveryFailedError(
            recipient=message.to,
            error_message=e.response.text[:500] or str(e),
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise DeliveryFailedError(
            recipient=message.to,
            error_message=str(e) or type(e).__name__,
        ) from e


def send_verification_email(
    email: str | None,
    verification_token: str | None,
    base_url: str | None,
    *,
    api_key: str,
    settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> dict[str, Any]:
    """
    Send a verification email via SendGrid.

    Parameters are validated before any network call is made.

    Args:
        email: Recipient email address
        verification_token: Token embedded in the verification link
        base_url: Host for the link and the sender address
        api_key: SendGrid API key resolved for this invocation
        settings: Override settings (default: from environment)
        http_client: Reuse an existing client (default: one per call)

    Returns:
        Provider response with status_code, message_id and body

    Raises:
        InvalidParametersError: If email, token or base_url is missing
        DeliveryFailedError: If SendGrid rejects the message or is unreachable
    """
    settings = settings or get_settings()
    message = build_verification_email(
        email, verification_token, base_url, settings=settings
    )

    if http_client is not None:
        response = _deliver(http_client, api_key, message, settings)
    else:
        with httpx.Client(timeout=settings.sendgrid_timeout_seconds) as client:
            response = _deliver(client, api_key, message, settings)

    return {
        "status_code": response.status_code,
        "message_id": response.headers.get("X-Message-Id"),
        "body": response.text or None,
    }
