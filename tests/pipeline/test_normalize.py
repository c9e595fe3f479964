from __future__ import annotations

import base64
import logging

from day_planner.models import NormalizedEmail
from day_planner.pipeline.normalize import build_email, header_value, normalize_emails


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def _message(mid: str, subject: str, body: str, *, sender: str = "Ann <ann@example.com>") -> dict:
    return {
        "id": mid,
        "snippet": f"snippet {mid}",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "From", "value": sender},
                {"name": "Subject", "value": subject},
                {"name": "Subject", "value": "ignored second subject"},
            ],
            "parts": [{"mimeType": "text/plain", "body": {"data": _b64(body)}}],
        },
    }


def test_build_email_cleans_body_and_tags_keyword() -> None:
    raw = _message(
        "m1",
        "Re: Project deadline tomorrow",
        "Please review.\n---------- Forwarded message ----------\nOld content",
    )

    email = build_email(raw)

    assert email == NormalizedEmail(
        id="m1",
        subject="Re: Project deadline tomorrow",
        from_email="Ann <ann@example.com>",
        body="Please review.",
        snippet="snippet m1",
        keyword="deadline",
    )


def test_missing_headers_default_to_empty_strings() -> None:
    raw = {"id": "m2", "payload": {"mimeType": "text/plain", "body": {"data": _b64("hi")}}}

    email = build_email(raw)

    assert email.subject == ""
    assert email.from_email == ""
    assert email.snippet == ""
    assert email.keyword == "none"


def test_header_lookup_is_exact_and_first_wins() -> None:
    headers = [{"name": "subject", "value": "lower"}, {"name": "Subject", "value": "A"}, {"name": "Subject", "value": "B"}]

    assert header_value(headers, "Subject") == "A"
    assert header_value([], "From") == ""


def test_normalize_keeps_only_relevant_messages_in_order() -> None:
    raw = [
        _message("a", "Team meeting at 3", "see you"),
        _message("b", "Lunch plans", "pizza?"),
        _message("c", "Follow-up: budget", "numbers attached"),
    ]

    emails = normalize_emails(raw)

    assert [e.id for e in emails] == ["a", "c"]
    assert [e.keyword for e in emails] == ["meeting", "follow-up"]


def test_undecodable_message_is_skipped_not_fatal(caplog) -> None:
    broken = _message("bad", "Task: fix build", "x")
    broken["payload"]["parts"][0]["body"]["data"] = "%%%not-base64%%%"
    raw = [broken, _message("ok", "New task assigned", "details")]

    with caplog.at_level(logging.WARNING):
        emails = normalize_emails(raw)

    assert [e.id for e in emails] == ["ok"]
    assert "bad" in caplog.text


def test_empty_batch() -> None:
    assert normalize_emails([]) == []
