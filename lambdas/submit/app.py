"""
Submit Lambda (API Gateway contact form → forwardemail.net).

Trigger:
- API Gateway (REST or HTTP API) proxy integration, `POST` with a form body.

What it does:
- Decodes the form body (url-encoded or multipart) and requires non-empty
  `name`, `email`, `subject` and `message` fields.
- Sends one email through the forwardemail.net `POST /v1/emails` API using Basic auth.
- Answers `OK` (text/plain) on success so the site's form script keeps working;
  every failure is a JSON `{"success": false, "message": ...}` body.
- Emits structured logs + embedded metrics via AWS Lambda Powertools.

Environment variables:
- `FORWARDEMAIL_USERNAME` (required): forwardemail.net account address, also the `from` address.
- `FORWARDEMAIL_PASSWORD` (required unless `FORWARDEMAIL_PASSWORD_SECRET_ID` is set).
- `FORWARDEMAIL_PASSWORD_SECRET_ID` (optional): Secrets Manager id holding the password.
- `TO_EMAIL` (required): where submissions are delivered.
- `FORWARDEMAIL_API_URL` (optional): send endpoint override.
- `FORWARDEMAIL_TIMEOUT_SECONDS` (optional): outbound timeout (default 10).
"""

import json
import os
from typing import Any, Dict, NamedTuple, Optional

import boto3
import requests

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.parameters import SecretsProvider

from lambdas.shared.schemas import build_email_payload, missing_fields
from lambdas.shared.utils import basic_auth, env, http_method, http_response, json_dumps, json_response, parse_form_body


logger = Logger(service="contact-form.submit")
metrics = Metrics(namespace="ContactForm", service="submit")

DEFAULT_API_URL = "https://api.forwardemail.net/v1/emails"

MSG_MISSING_FIELDS = "Missing required fields."
MSG_SEND_FAILED = "Failed to send email."
MSG_UNEXPECTED = "An unexpected error occurred."
MSG_METHOD_NOT_ALLOWED = "Method not allowed."

_secrets: Optional[SecretsProvider] = None


class Config(NamedTuple):
    username: str
    password: str
    to_email: str
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 10.0


def _clients() -> requests.Session:
    return requests.Session()


def _secrets_provider() -> SecretsProvider:
    global _secrets
    if _secrets is None:
        _secrets = SecretsProvider(boto3_client=boto3.client("secretsmanager"))
    return _secrets


def load_config() -> Config:
    secret_id = os.getenv("FORWARDEMAIL_PASSWORD_SECRET_ID")
    if not os.getenv("FORWARDEMAIL_PASSWORD") and secret_id:
        password = _secrets_provider().get(secret_id)
        if not password:
            raise RuntimeError(f"Empty secret: {secret_id}")
    else:
        password = env("FORWARDEMAIL_PASSWORD")

    return Config(
        username=env("FORWARDEMAIL_USERNAME"),
        password=password,
        to_email=env("TO_EMAIL"),
        api_url=env("FORWARDEMAIL_API_URL", DEFAULT_API_URL),
        timeout_seconds=float(env("FORWARDEMAIL_TIMEOUT_SECONDS", "10")),
    )


def _log(event: str, **fields: Any) -> None:
    logger.info(event, extra=fields)


def _failure(status: int, message: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    return json_response(status, {"success": False, "message": message}, headers=headers)


def _unexpected_error() -> Dict[str, Any]:
    metrics.add_metric(name="UnexpectedErrors", unit=MetricUnit.Count, value=1)
    return _failure(500, MSG_UNEXPECTED)


def _send_email(session: requests.Session, config: Config, payload: Dict[str, Any]) -> requests.Response:
    return session.post(
        config.api_url,
        data=json_dumps(payload).encode("utf-8"),
        headers={
            "Authorization": basic_auth(config.username, config.password),
            "Content-Type": "application/json",
        },
        timeout=config.timeout_seconds,
    )


def handle_submission(event: Dict[str, Any], config: Config) -> Dict[str, Any]:
    """Validate one form submission, forward it by email and map the outcome to a proxy response."""
    try:
        method = http_method(event)
        if method and method != "POST":
            _log("submit_method_not_allowed", method=method)
            return _failure(405, MSG_METHOD_NOT_ALLOWED, headers={"Allow": "POST"})

        fields = parse_form_body(event)

        missing = missing_fields(fields)
        if missing:
            metrics.add_metric(name="ValidationFailures", unit=MetricUnit.Count, value=1)
            _log("submit_missing_fields", missing=missing)
            return _failure(400, MSG_MISSING_FIELDS)

        payload = build_email_payload(fields, sender=config.username, recipient=config.to_email)

        with _clients() as session:
            try:
                resp = _send_email(session, config, payload)
            except requests.RequestException as e:
                logger.error("forwardemail_transport_error", extra={"error": str(e)})
                metrics.add_metric(name="DeliveryFailures", unit=MetricUnit.Count, value=1)
                return _failure(500, MSG_SEND_FAILED)

            if not 200 <= resp.status_code < 300:
                logger.error(
                    "forwardemail_api_error",
                    extra={"status": resp.status_code, "reason": resp.reason, "body": resp.text},
                )
                metrics.add_metric(name="DeliveryFailures", unit=MetricUnit.Count, value=1)
                return _failure(500, MSG_SEND_FAILED)

        metrics.add_metric(name="EmailsSent", unit=MetricUnit.Count, value=1)
        _log("submit_email_sent", status=resp.status_code)
        # The site's form script checks for this literal body, not JSON.
        return http_response(200, "OK", content_type="text/plain;charset=UTF-8")
    except Exception:
        logger.exception("submit_unexpected_error")
        return _unexpected_error()


@metrics.log_metrics(capture_cold_start_metric=True)
def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    metrics.add_metric(name="SubmissionsReceived", unit=MetricUnit.Count, value=1)
    try:
        config = load_config()
    except Exception:
        logger.exception("submit_config_error")
        return _unexpected_error()
    return handle_submission(event, config)


# Local quick check: `python -m lambdas.submit.app < event.json` (needs the FORWARDEMAIL_* / TO_EMAIL env vars).
def _main() -> int:
    import sys
    from types import SimpleNamespace

    event = json.loads(sys.stdin.read())
    context = SimpleNamespace(function_name="contact-form-submit-local", aws_request_id="local")
    print(json.dumps(handler(event, context=context), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
