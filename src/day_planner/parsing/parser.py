from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Set

from day_planner.errors import DecodeError

# Real-world mail rarely nests deeper than a handful of multipart levels.
MAX_PART_DEPTH = 32


def decode_part_data(data: str) -> str:
    """Decode Gmail body data (URL-safe or standard base64, padding optional, line breaks ignored)."""
    normalized = "".join(data.split()).replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 body data: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def _body_data(part: Dict[str, Any]) -> str:
    body = part.get("body") or {}
    return body.get("data") or ""


def _collect_plain_text(part: Dict[str, Any], depth: int, active: Set[int]) -> List[str]:
    # Depth-first, document order; returns decoded text/plain leaves.
    if depth > MAX_PART_DEPTH:
        raise DecodeError(f"MIME tree deeper than {MAX_PART_DEPTH} levels")
    if id(part) in active:
        raise DecodeError("Cyclic MIME part structure")

    children = part.get("parts") or []
    if not children:
        if part.get("mimeType") == "text/plain" and _body_data(part):
            return [decode_part_data(_body_data(part))]
        return []

    active.add(id(part))
    try:
        chunks: List[str] = []
        for child in children:
            if not isinstance(child, dict):
                raise DecodeError(f"Unexpected MIME part type: {type(child).__name__}")
            chunks.extend(_collect_plain_text(child, depth + 1, active))
        return chunks
    finally:
        active.discard(id(part))


def extract_body_from_payload(payload: dict) -> str:
    """
    Extract the plain text body from a Gmail message payload.

    All text/plain leaves are concatenated in depth-first order. A payload
    without child parts is decoded directly from its own body data.
    Raises DecodeError on invalid base64, cycles or excessive nesting.
    """
    if payload.get("parts"):
        return "".join(_collect_plain_text(payload, 0, set()))

    data = _body_data(payload)
    if data:
        return decode_part_data(data)
    return ""
