import base64

import pytest

from lambdas.shared.utils import basic_auth, env, get_header, http_method, json_response, parse_form_body


BOUNDARY = "----formboundary7MA4YWxk"


def _multipart(parts):
    lines = []
    for disposition, value in parts:
        lines.append(f"--{BOUNDARY}")
        lines.append(f"Content-Disposition: form-data; {disposition}")
        if "filename=" in disposition:
            lines.append("Content-Type: text/plain")
        lines.append("")
        lines.append(value)
    lines.append(f"--{BOUNDARY}--")
    lines.append("")
    return "\r\n".join(lines)


def test_urlencoded_last_value_wins():
    event = {"headers": {"Content-Type": "application/x-www-form-urlencoded"}, "body": "name=a&name=b&email="}
    assert parse_form_body(event) == {"name": "b", "email": ""}


def test_urlencoded_is_default_without_content_type():
    event = {"body": "name=Jane+Doe&message=line1%0Aline2"}
    assert parse_form_body(event) == {"name": "Jane Doe", "message": "line1\nline2"}


def test_multipart_fields_and_file_parts_skipped():
    body = _multipart(
        [
            ('name="name"', "Jane"),
            ('name="message"', "Hi\nThere"),
            ('name="attachment"; filename="notes.txt"', "ignored"),
        ]
    )
    event = {
        "headers": {"content-type": f"multipart/form-data; boundary={BOUNDARY}"},
        "body": base64.b64encode(body.encode()).decode(),
        "isBase64Encoded": True,
    }
    assert parse_form_body(event) == {"name": "Jane", "message": "Hi\nThere"}


def test_multipart_without_boundary_is_rejected():
    event = {"headers": {"Content-Type": "multipart/form-data"}, "body": "name=Jane"}
    with pytest.raises(ValueError):
        parse_form_body(event)


def test_unsupported_content_type_is_rejected():
    event = {"headers": {"Content-Type": "application/json"}, "body": '{"name":"Jane"}'}
    with pytest.raises(ValueError, match="Unsupported content type"):
        parse_form_body(event)


def test_get_header_is_case_insensitive():
    assert get_header({"headers": {"CONTENT-TYPE": "x"}}, "content-type") == "x"
    assert get_header({"headers": None}, "content-type") is None


def test_http_method_v1_v2_and_direct_invoke():
    assert http_method({"httpMethod": "post"}) == "POST"
    assert http_method({"requestContext": {"http": {"method": "GET"}}}) == "GET"
    assert http_method({}) is None


def test_basic_auth():
    assert basic_auth("user@example.com", "pw") == "Basic dXNlckBleGFtcGxlLmNvbTpwdw=="


def test_env_rejects_missing_and_empty(monkeypatch):
    monkeypatch.setenv("CONTACT_EMPTY", "")
    monkeypatch.delenv("CONTACT_UNSET", raising=False)
    with pytest.raises(RuntimeError, match="CONTACT_EMPTY"):
        env("CONTACT_EMPTY")
    with pytest.raises(RuntimeError, match="CONTACT_UNSET"):
        env("CONTACT_UNSET")
    assert env("CONTACT_UNSET", "fallback") == "fallback"


def test_json_response_is_compact():
    resp = json_response(400, {"success": False, "message": "Missing required fields."})
    assert resp == {
        "statusCode": 400,
        "headers": {"Content-Type": "application/json"},
        "body": '{"success":false,"message":"Missing required fields."}',
    }
