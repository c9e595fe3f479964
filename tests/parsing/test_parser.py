from __future__ import annotations

import base64

import pytest

from day_planner.errors import DecodeError
from day_planner.parsing.parser import MAX_PART_DEPTH, extract_body_from_payload


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def _leaf(text: str, mime_type: str = "text/plain") -> dict:
    return {"mimeType": mime_type, "body": {"data": _b64(text)}}


def test_concatenates_plain_text_leaves_in_depth_first_order() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            _leaf("one "),
            {
                "mimeType": "multipart/alternative",
                "parts": [_leaf("two "), _leaf("<b>skip</b>", "text/html"), _leaf("three ")],
            },
            _leaf("four"),
        ],
    }

    assert extract_body_from_payload(payload) == "one two three four"


def test_ignores_html_only_messages() -> None:
    payload = {"mimeType": "multipart/alternative", "parts": [_leaf("<p>hi</p>", "text/html")]}

    assert extract_body_from_payload(payload) == ""


def test_decodes_single_part_payload_directly() -> None:
    payload = {"mimeType": "text/plain", "body": {"data": _b64("Hallo Welt, grüße")}}

    assert extract_body_from_payload(payload) == "Hallo Welt, grüße"


def test_accepts_standard_base64_without_padding() -> None:
    data = base64.b64encode(b"ab?>").decode("ascii").rstrip("=")
    payload = {"mimeType": "text/plain", "body": {"data": data}}

    assert extract_body_from_payload(payload) == "ab?>"


def test_line_wrapped_base64_is_decoded() -> None:
    data = base64.encodebytes(("Line wrapped body " * 8).encode("utf-8")).decode("ascii")
    assert "\n" in data.strip()
    payload = {"mimeType": "text/plain", "body": {"data": data}}

    assert extract_body_from_payload(payload) == "Line wrapped body " * 8


def test_empty_payload_yields_empty_string() -> None:
    assert extract_body_from_payload({"mimeType": "text/plain"}) == ""
    assert extract_body_from_payload({"mimeType": "multipart/mixed", "parts": []}) == ""


def test_invalid_base64_raises_decode_error() -> None:
    payload = {"mimeType": "multipart/mixed", "parts": [{"mimeType": "text/plain", "body": {"data": "!!!"}}]}

    with pytest.raises(DecodeError):
        extract_body_from_payload(payload)


def test_cyclic_tree_raises_decode_error() -> None:
    node: dict = {"mimeType": "multipart/mixed", "parts": [_leaf("x")]}
    node["parts"].append(node)

    with pytest.raises(DecodeError):
        extract_body_from_payload(node)


def test_excessive_nesting_raises_decode_error() -> None:
    node = _leaf("deep")
    for _ in range(MAX_PART_DEPTH + 2):
        node = {"mimeType": "multipart/mixed", "parts": [node]}

    with pytest.raises(DecodeError):
        extract_body_from_payload(node)


def test_shared_subtree_is_not_a_cycle() -> None:
    shared = {"mimeType": "multipart/alternative", "parts": [_leaf("ab")]}
    payload = {"mimeType": "multipart/mixed", "parts": [shared, shared]}

    assert extract_body_from_payload(payload) == "abab"
