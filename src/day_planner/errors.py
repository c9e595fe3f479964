from __future__ import annotations

from typing import Optional


class DayPlannerError(Exception):
    """Base class for errors raised by the planner core."""


class ProviderFetchError(DayPlannerError):
    """A data source (email, calendar, tasks, model) failed or timed out."""

    def __init__(self, source: str, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.cause = cause


class DecodeError(DayPlannerError):
    """Malformed MIME structure: bad base64, a cycle, or an unbounded tree."""


class ModelResponseMalformed(DayPlannerError):
    # Never leaves the response parser, always replaced by the fallback schedule.
    pass


class MissingCredentialsError(DayPlannerError):
    pass
