"""
SendVerificationEmail Lambda

Event-triggered Lambda that delivers account-verification emails for
notifications published by the web application.

Components:
- handler: Lambda entry point, record decoding and the batch loop

Flow:
1. Triggered by SNS (or SQS) with a batch of notification records
2. Resolve the SendGrid API key once for the invocation
3. Decode {email, verificationToken} from each record in order
4. Send one verification email per record via SendGrid
5. Return {statusCode, body}
"""

from lambdas.send_verification_email.handler import (
    BatchSummary,
    lambda_handler,
    parse_record,
    process_batch,
)

__all__ = [
    "BatchSummary",
    "lambda_handler",
    "parse_record",
    "process_batch",
]
