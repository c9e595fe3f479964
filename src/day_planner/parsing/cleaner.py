from __future__ import annotations

import re

FORWARDED_MARKER = "---------- Forwarded message ----------"

# Everything from the first forward/quote marker onwards is dropped.
_QUOTE_SPLIT_RE = re.compile(re.escape(FORWARDED_MARKER) + r"|On .*? wrote:")

# Header lines left inline by forwarding clients. Leading whitespace is
# allowed so that trimming can never expose a new match.
_HEADER_LINE_RE = re.compile(
    r"^[^\S\n]*(?:subject|from|to|date):.*$",
    flags=re.IGNORECASE | re.MULTILINE,
)


def strip_quoted_content(text: str) -> str:
    return _QUOTE_SPLIT_RE.split(text, maxsplit=1)[0].strip()


def strip_header_lines(text: str) -> str:
    return _HEADER_LINE_RE.sub("", text)


def clean_body_text(text: str) -> str:
    """
    Remove quoted replies, forwarded blocks and stray header lines.
    Applying it twice gives the same result as applying it once.
    """
    return strip_header_lines(strip_quoted_content(text)).strip()
