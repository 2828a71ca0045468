#!/usr/bin/env python3
"""
Build a sample contact-form API Gateway event and send it to the submit function.

Examples:
- Print the event (pipe into `python -m lambdas.submit.app` for a local run):
  `python scripts/send_test_submission.py --name Jane --email jane@example.com`
- Invoke the deployed function:
  `python scripts/send_test_submission.py --function-name contact-form-submit --message "Hi\nThere"`
"""

import argparse
import json
from urllib.parse import urlencode

import boto3


def build_event(name: str, email: str, subject: str, message: str) -> dict:
    form = {"name": name, "email": email, "subject": subject, "message": message}
    return {
        "httpMethod": "POST",
        "path": "/submit",
        "headers": {"Content-Type": "application/x-www-form-urlencoded"},
        "body": urlencode(form),
        "isBase64Encoded": False,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test submission to the contact-form Lambda.")
    parser.add_argument("--name", default="Test Sender")
    parser.add_argument("--email", default="test@example.com")
    parser.add_argument("--subject", default="Test submission")
    parser.add_argument("--message", default="Hello,\\nthis is a test.", help=r"Literal '\n' becomes a newline.")
    parser.add_argument("--function-name", help="Invoke this Lambda instead of printing the event.")
    args = parser.parse_args()

    event = build_event(args.name, args.email, args.subject, args.message.replace("\\n", "\n"))
    if not args.function_name:
        print(json.dumps(event, indent=2))
        return 0

    client = boto3.client("lambda")
    resp = client.invoke(FunctionName=args.function_name, Payload=json.dumps(event).encode("utf-8"))
    result = json.loads(resp["Payload"].read().decode("utf-8"))
    print(json.dumps(result, indent=2))
    if resp.get("FunctionError"):
        return 1
    return 0 if result.get("statusCode") == 200 else 1


if __name__ == "__main__":
    raise SystemExit(main())
