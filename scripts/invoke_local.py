#!/usr/bin/env python3
"""
Local Invocation Script

Builds an SNS event carrying one verification notification and runs the
SendVerificationEmail handler in-process. Configuration (base URL, API key
or secret name) is read from the environment exactly as in Lambda.

Usage:
    # Print the event without invoking the handler
    python scripts/invoke_local.py --email a@b.com --token tok123 --dry-run

    # Send for real (requires SENDGRID_API_KEY or AWS credentials)
    python scripts/invoke_local.py --email a@b.com --token tok123 --base-url example.com
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any
from uuid import uuid4

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def build_sns_event(email: str, token: str) -> dict[str, Any]:
    """Build a single-record SNS event as delivered to Lambda."""
    return {
        "Records": [
            {
                "EventSource": "aws:sns",
                "EventVersion": "1.0",
                "Sns": {
                    "Type": "Notification",
                    "MessageId": str(uuid4()),
                    "TopicArn": "arn:aws:sns:us-east-1:000000000000:verify-email",
                    "Message": json.dumps({"email": email, "verificationToken": token}),
                },
            }
        ]
    }


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Invoke the verification email handler locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --email a@b.com --token tok123 --dry-run
  %(prog)s --email a@b.com --token tok123 --base-url example.com
        """,
    )
    parser.add_argument("--email", required=True, help="Recipient email address")
    parser.add_argument("--token", required=True, help="Verification token")
    parser.add_argument(
        "--base-url",
        help="Override BASE_URL for this run",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the event without invoking the handler",
    )

    args = parser.parse_args()
    event = build_sns_event(args.email, args.token)

    if args.dry_run:
        print(json.dumps(event, indent=2))
        return 0

    if args.base_url:
        os.environ["BASE_URL"] = args.base_url

    from lambdas.send_verification_email.handler import lambda_handler

    response = lambda_handler(event, None)
    print(json.dumps(response, indent=2))
    return 0 if response["statusCode"] == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
