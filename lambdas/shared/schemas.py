from __future__ import annotations

from typing import Any, Dict, List, Mapping


REQUIRED_FIELDS = ("name", "email", "subject", "message")

SUBJECT_PREFIX = "New Contact Form Submission: "


def missing_fields(fields: Mapping[str, Any]) -> List[str]:
    # Presence only: "" counts as missing, whitespace does not.
    return [k for k in REQUIRED_FIELDS if not fields.get(k)]


def format_address(display_name: str, address: str) -> str:
    return f'"{display_name}" <{address}>'


def render_html(fields: Mapping[str, str]) -> str:
    message = fields["message"].replace("\n", "<br>")
    return "\n".join(
        [
            "<p>You have received a new message from your website contact form.</p>",
            "<hr>",
            f"<p><b>Name:</b> {fields['name']}</p>",
            f"<p><b>Email:</b> {fields['email']}</p>",
            "<hr>",
            "<p><b>Message:</b></p>",
            f"<p>{message}</p>",
        ]
    )


def build_email_payload(fields: Mapping[str, str], sender: str, recipient: str) -> Dict[str, Any]:
    """
    Build the forwardemail.net `POST /v1/emails` body for one submission.

    `sender` is the authenticated account address; the submitter only appears
    as display name and in `replyTo`.
    """
    return {
        "to": [recipient],
        "from": format_address(fields["name"], sender),
        "replyTo": format_address(fields["name"], fields["email"]),
        "subject": f"{SUBJECT_PREFIX}{fields['subject']}",
        "html": render_html(fields),
    }
