from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from day_planner.errors import DecodeError
from day_planner.models import NormalizedEmail
from day_planner.parsing.cleaner import clean_body_text
from day_planner.parsing.parser import extract_body_from_payload
from day_planner.rules.classification import KeywordClassifier, default_classifier

logger = logging.getLogger(__name__)


def header_value(headers: Iterable[Dict[str, Any]], name: str) -> str:
    # First header with an exact name match wins, like Gmail's own UI.
    for header in headers or []:
        if header.get("name") == name:
            return str(header.get("value") or "")
    return ""


def build_email(
    raw: Dict[str, Any], classifier: KeywordClassifier = default_classifier
) -> NormalizedEmail:
    """Normalize one Gmail message resource. Raises DecodeError on bad MIME."""
    payload = raw.get("payload") or {}
    headers = payload.get("headers") or []

    subject = header_value(headers, "Subject")
    body = clean_body_text(extract_body_from_payload(payload))

    return NormalizedEmail(
        id=str(raw.get("id") or ""),
        subject=subject,
        from_email=header_value(headers, "From"),
        body=body,
        snippet=raw.get("snippet") or "",
        keyword=classifier.classify(subject),
    )


def normalize_emails(
    raw_messages: Iterable[Dict[str, Any]],
    classifier: Optional[KeywordClassifier] = None,
) -> List[NormalizedEmail]:
    """
    Turn raw Gmail messages into cleaned, keyword-tagged emails.

    Only messages whose subject matches the keyword vocabulary are returned,
    in input order. A message with a malformed MIME tree is skipped and
    logged; the rest of the batch is unaffected.
    """
    classifier = classifier or default_classifier
    relevant: List[NormalizedEmail] = []
    skipped_undecodable = 0
    dropped_irrelevant = 0

    for raw in raw_messages:
        try:
            email = build_email(raw, classifier)
        except DecodeError as exc:
            skipped_undecodable += 1
            logger.warning("Skipping message %s: %s", raw.get("id"), exc)
            continue

        if classifier.is_relevant(email.subject):
            relevant.append(email)
        else:
            dropped_irrelevant += 1

    logger.debug(
        "Normalized %d relevant emails (dropped_irrelevant=%d, undecodable=%d)",
        len(relevant),
        dropped_irrelevant,
        skipped_undecodable,
    )
    return relevant
