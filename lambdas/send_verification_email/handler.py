"""
SendVerificationEmail Lambda Handler

Main entry point for account-verification email delivery.
Consumes verification notifications and sends one email per record.

Trigger: SNS topic (or SQS queue) fed by the web application
Output: SendGrid transactional email per record

Flow:
1. Resolve the SendGrid API key (settings or Secrets Manager)
2. For each record, in order: decode {email, verificationToken}
3. Render the verification link and email, send via SendGrid
4. Log per-record failures and continue with the next record
5. Return {statusCode, body}
"""

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from mailer.config import Settings, get_settings
from mailer.exceptions import (
    CredentialUnavailableError,
    DeliveryFailedError,
    InvalidParametersError,
    MalformedBatchError,
)
from mailer.models.events import InvocationResult, VerificationRequest
from mailer.observability import configure_logging
from mailer.tools.email import send_verification_email
from mailer.tools.secrets import resolve_sendgrid_api_key

configure_logging()

log = structlog.get_logger()

CREDENTIAL_FAILURE_MESSAGE = "Failed to resolve email credential"
MALFORMED_BATCH_MESSAGE = "Malformed notification batch"
UNEXPECTED_FAILURE_MESSAGE = "An error occurred"


@dataclass
class BatchSummary:
    """Per-record outcome tallies for one invocation."""

    records: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0  # Missing email, token or base URL
    errors: list[str] = field(default_factory=list)


def _get_http_client(settings: Settings) -> httpx.Client:
    """Get HTTP client for SendGrid, shared by every send in the batch."""
    return httpx.Client(timeout=settings.sendgrid_timeout_seconds)


def _extract_message(record: Any, index: int) -> str:
    """Pull the JSON payload string out of an SNS or SQS record."""
    if not isinstance(record, dict):
        raise MalformedBatchError("record is not an object", record_index=index)

    sns = record.get("Sns")
    if isinstance(sns, dict) and "Message" in sns:
        message = sns["Message"]
    elif "body" in record:
        message = record["body"]
    else:
        raise MalformedBatchError("record has no Sns.Message or body", record_index=index)

    if not isinstance(message, str):
        raise MalformedBatchError("message payload is not a string", record_index=index)
    return message


def parse_record(record: Any, index: int = 0) -> VerificationRequest:
    """
    Decode one notification record.

    Missing fields are allowed here and rejected by the sender; anything
    that is not a JSON object of strings is a malformed batch.

    Raises:
        MalformedBatchError: If the record or its payload cannot be decoded
    """
    message = _extract_message(record, index)

    try:
        payload = json.loads(message)
    except json.JSONDecodeError as e:
        raise MalformedBatchError(f"invalid JSON: {e.msg}", record_index=index) from e

    if not isinstance(payload, dict):
        raise MalformedBatchError("payload is not a JSON object", record_index=index)

    try:
        return VerificationRequest.model_validate(payload)
    except ValidationError as e:
        raise MalformedBatchError(
            f"invalid field types: {e.error_count()} error(s)", record_index=index
        ) from e


def _get_records(event: Any) -> list[Any]:
    if not isinstance(event, dict) or not isinstance(event.get("Records"), list):
        raise MalformedBatchError("event has no Records list")
    return event["Records"]


def process_batch(
    records: list[Any],
    base_url: str | None,
    *,
    api_key: str,
    settings: Settings | None = None,
    http_client: httpx.Client | None = None,
) -> BatchSummary:
    """
    Send one verification email per record, strictly in order.

    Send failures are logged and counted; the loop always moves on to the
    next record. Decoding failures abort the remaining records.

    Args:
        records: Notification records from the trigger
        base_url: Host for links and the sender address
        api_key: SendGrid API key resolved for this invocation
        settings: Override settings (default: from environment)
        http_client: Shared HTTP client for all sends

    Returns:
        BatchSummary of the processed records

    Raises:
        MalformedBatchError: If a record cannot be decoded
    """
    settings = settings or get_settings()
    summary = BatchSummary(records=len(records))

    for index, record in enumerate(records):
        request = parse_record(record, index)

        log.info("verification_send_attempted", record_index=index, email=request.email)

        try:
            response = send_verification_email(
                request.email,
                request.verification_token,
                base_url,
                api_key=api_key,
                settings=settings,
                http_client=http_client,
            )
        except InvalidParametersError as e:
            summary.skipped += 1
            summary.errors.append(str(e))
            log.warning(
                "verification_email_skipped",
                record_index=index,
                email=request.email,
                missing=e.missing,
            )
            continue
        except DeliveryFailedError as e:
            summary.failed += 1
            summary.errors.append(str(e))
            log.error(
                "verification_email_failed",
                record_index=index,
                email=request.email,
                status_code=e.status_code,
                error=e.message,
            )
            continue

        summary.sent += 1
        log.info(
            "verification_email_sent",
            record_index=index,
            email=request.email,
            response=response,
        )

    return summary


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Main Lambda handler for verification email delivery.

    Returns 200 once every record has been iterated, even when individual
    sends failed. Returns 500 when the credential cannot be resolved, the
    batch cannot be decoded, or an unexpected error escapes the loop.

    Args:
        event: SNS or SQS event with a Records list
        context: Lambda context

    Returns:
        Dict with statusCode and body
    """
    settings = get_settings()
    request_id = getattr(context, "aws_request_id", None)

    log.info("verification_handler_started", request_id=request_id)

    try:
        api_key = resolve_sendgrid_api_key(settings)
    except CredentialUnavailableError as e:
        log.error("credential_resolution_failed", error=str(e))
        return InvocationResult.failure(CREDENTIAL_FAILURE_MESSAGE).to_response()

    try:
        records = _get_records(event)
        with _get_http_client(settings) as client:
            summary = process_batch(
                records,
                settings.base_url,
                api_key=api_key,
                settings=settings,
                http_client=client,
            )
    except MalformedBatchError as e:
        log.error("verification_batch_malformed", error=str(e), record_index=e.record_index)
        return InvocationResult.failure(MALFORMED_BATCH_MESSAGE).to_response()
    except Exception as e:
        log.exception("verification_processing_failed", error=str(e))
        return InvocationResult.failure(UNEXPECTED_FAILURE_MESSAGE).to_response()

    log.info(
        "verification_batch_completed",
        records=summary.records,
        sent=summary.sent,
        failed=summary.failed,
        skipped=summary.skipped,
    )

    return InvocationResult.success().to_response()
