from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Priority order matters: classify() returns the first hit.
KEYWORDS: Tuple[str, ...] = ("meeting", "follow-up", "task", "deadline")
NO_KEYWORD = "none"


@dataclass(frozen=True)
class KeywordClassifier:
    keywords: Tuple[str, ...] = KEYWORDS

    def classify(self, subject: str) -> str:
        """Return the first keyword contained in the subject, or "none"."""
        lowered = (subject or "").lower()
        for keyword in self.keywords:
            if keyword in lowered:
                return keyword
        return NO_KEYWORD

    def is_relevant(self, subject: str) -> bool:
        # Inclusion filter only, independent of which keyword classify() picks.
        lowered = (subject or "").lower()
        return any(keyword in lowered for keyword in self.keywords)


default_classifier = KeywordClassifier()


def classify_subject(subject: str) -> str:
    return default_classifier.classify(subject)


def is_relevant(subject: str) -> bool:
    return default_classifier.is_relevant(subject)
