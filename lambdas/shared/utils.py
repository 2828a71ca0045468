import base64
import json
import logging
import os
from email.parser import BytesParser
from email.policy import HTTP
from urllib.parse import parse_qsl
from typing import Any, Dict, Optional


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.getLogger().setLevel(level)
    logging.getLogger(__name__).setLevel(level)


_configure_logging()


FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str)


def env(name: str, default: Optional[str] = None) -> str:
    v = os.getenv(name, default)
    if v is None or v == "":
        raise RuntimeError(f"Missing env var: {name}")
    return v


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    headers = event.get("headers") or {}
    wanted = name.lower()
    for k, v in headers.items():
        if k.lower() == wanted:
            return v
    return None


def http_method(event: Dict[str, Any]) -> Optional[str]:
    # HTTP API (v2)
    m = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    if m:
        return m.upper()
    # REST API (v1)
    m = event.get("httpMethod")
    return m.upper() if m else None


def event_body_bytes(event: Dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


def parse_form_body(event: Dict[str, Any]) -> Dict[str, str]:
    """
    Decode an API Gateway proxy event body into a field -> value mapping.

    Accepts url-encoded and multipart form bodies; a missing Content-Type is
    treated as url-encoded. Repeated fields keep the last value. Multipart
    file parts are skipped.

    Raises ValueError for any other content type or an unreadable multipart body.
    """
    content_type = get_header(event, "content-type") or FORM_URLENCODED
    mime_type = content_type.split(";", 1)[0].strip().lower()
    raw = event_body_bytes(event)

    if mime_type == FORM_URLENCODED:
        return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
    if mime_type == MULTIPART_FORM:
        return _parse_multipart(content_type, raw)
    raise ValueError(f"Unsupported content type: {mime_type}")


def _parse_multipart(content_type: str, raw: bytes) -> Dict[str, str]:
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    msg = BytesParser(policy=HTTP).parsebytes(head + raw)
    if not msg.is_multipart():
        raise ValueError("Malformed multipart body")

    fields: Dict[str, str] = {}
    for part in msg.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name or part.get_filename() is not None:
            continue
        payload = part.get_payload(decode=True) or b""
        fields[str(name)] = payload.decode(part.get_content_charset() or "utf-8", errors="replace")
    return fields


def basic_auth(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def http_response(
    status: int,
    body: str,
    content_type: str = "application/json",
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": content_type, **(headers or {})},
        "body": body,
    }


def json_response(status: int, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    return http_response(status, json_dumps(payload), headers=headers)
