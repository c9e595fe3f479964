from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from day_planner.errors import ModelResponseMalformed
from day_planner.models import (
    MEETING_FIELDS,
    SCHEDULE_FIELDS,
    TASK_ENTRY_FIELDS,
    TIME_BLOCKS,
    DailySchedule,
    MeetingEntry,
    TaskBlockEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_TASK_ENTRY: Dict[str, Any] = {
    "time": "",
    "description": "",
    "duration": "30m",
    "priority": "medium",
    "action": "review",
    "source": "task",
}

DEFAULT_MEETING_DURATION = "30m"

_WHITESPACE_RE = re.compile(r"\s+")
_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
# Greedy: from the first "{" to the last "}".
_BRACE_SPAN_RE = re.compile(r"\{.*\}", flags=re.DOTALL)


@dataclass(frozen=True)
class Extraction:
    """Outcome of pulling a JSON object out of free text."""

    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


def fallback_schedule() -> DailySchedule:
    return DailySchedule(
        morning_tasks=[
            TaskBlockEntry(
                time="9:00 AM",
                description="Review daily schedule",
                duration="30m",
                priority="medium",
                action="review",
                source="system",
            )
        ],
        afternoon_tasks=[],
        evening_tasks=[],
        total_tasks_today=1,
        urgent_tasks=0,
        important_meetings=[],
    )


def strip_code_fence(text: str) -> str:
    return _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", text))


def extract_json_object(response: str) -> Extraction:
    """Collapse whitespace, drop markdown fences and parse the outer {...} span."""
    if not isinstance(response, str) or not response.strip():
        return Extraction(error="empty response")

    text = strip_code_fence(_WHITESPACE_RE.sub(" ", response).strip())
    match = _BRACE_SPAN_RE.search(text)
    if not match:
        return Extraction(error="no JSON object found")

    try:
        data = json.loads(match.group(0))
    except ValueError as exc:
        # JSONDecodeError, or an integer literal past the int conversion limit.
        return Extraction(error=f"invalid JSON: {exc}")
    if not isinstance(data, dict):
        return Extraction(error=f"expected a JSON object, got {type(data).__name__}")
    return Extraction(data=data)


def coalesce_task_entry(entry: Any) -> Dict[str, Any]:
    # Supplied values win, missing or null ones take the default, extras survive.
    if not isinstance(entry, dict):
        raise ModelResponseMalformed(f"task entry is not an object: {entry!r}")
    merged = dict(entry)
    for name, default in DEFAULT_TASK_ENTRY.items():
        if merged.get(name) is None:
            merged[name] = default
    return merged


def _count(value: Any, name: str) -> int:
    # Unusable counts become 0; they do not invalidate the tasks.
    if not value or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        try:
            return int(value.strip())
        except ValueError:
            pass
    logger.debug("Ignoring unusable %s value %.100r", name, value)
    return 0


def apply_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill every gap the model left so the result has the full schedule shape."""
    repaired = dict(data)
    for block in TIME_BLOCKS:
        entries = repaired.get(block)
        if not isinstance(entries, list):
            entries = []
        repaired[block] = [coalesce_task_entry(entry) for entry in entries]

    repaired["totalTasksToday"] = _count(repaired.get("totalTasksToday"), "totalTasksToday")
    repaired["urgentTasks"] = _count(repaired.get("urgentTasks"), "urgentTasks")

    meetings = repaired.get("importantMeetings")
    if not isinstance(meetings, list):
        meetings = []
    kept = [entry for entry in meetings if isinstance(entry, dict)]
    if len(kept) != len(meetings):
        logger.warning("Skipped %d meeting entries that are not objects", len(meetings) - len(kept))
    repaired["importantMeetings"] = kept
    return repaired


def validate_schedule(data: Dict[str, Any]) -> None:
    missing = [name for name in SCHEDULE_FIELDS if name not in data]
    if missing:
        raise ModelResponseMalformed(f"missing fields: {', '.join(missing)}")

    for block in TIME_BLOCKS:
        for index, entry in enumerate(data[block]):
            absent = [name for name in TASK_ENTRY_FIELDS if name not in entry]
            if absent:
                raise ModelResponseMalformed(
                    f"{block}[{index}] lacks {', '.join(absent)}"
                )


def _meeting(entry: Dict[str, Any]) -> MeetingEntry:
    participants = entry.get("participants")
    if isinstance(participants, str):
        participants = [participants]
    elif not isinstance(participants, list):
        participants = []
    return MeetingEntry(
        time=entry.get("time") or "",
        description=entry.get("description") or "",
        duration=entry.get("duration") or DEFAULT_MEETING_DURATION,
        participants=[str(p) for p in participants],
        extra={k: v for k, v in entry.items() if k not in MEETING_FIELDS},
    )


def _to_schedule(data: Dict[str, Any]) -> DailySchedule:
    blocks: List[List[TaskBlockEntry]] = [
        [TaskBlockEntry.from_dict(entry) for entry in data[block]] for block in TIME_BLOCKS
    ]
    return DailySchedule(
        morning_tasks=blocks[0],
        afternoon_tasks=blocks[1],
        evening_tasks=blocks[2],
        total_tasks_today=data["totalTasksToday"],
        urgent_tasks=data["urgentTasks"],
        important_meetings=[_meeting(entry) for entry in data["importantMeetings"]],
    )


def parse_schedule_response(response: str) -> DailySchedule:
    """
    Coerce free-form model output into a DailySchedule.

    Never raises: any extraction, parsing or validation problem is logged and
    answered with fallback_schedule().
    """
    try:
        extraction = extract_json_object(response)
        if not extraction.ok:
            raise ModelResponseMalformed(extraction.error or "no data")
        repaired = apply_defaults(extraction.data)
        validate_schedule(repaired)
        return _to_schedule(repaired)
    except (ModelResponseMalformed, ValueError, RecursionError) as exc:
        logger.warning("Model response malformed, using fallback schedule: %s", exc)
        logger.debug("Raw model response: %.500s", response)
        return fallback_schedule()
