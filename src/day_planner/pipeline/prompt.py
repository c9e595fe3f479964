from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from day_planner.models import NormalizedEmail

OUTPUT_SHAPE = {
    "morningTasks": [
        {
            "time": "09:30",
            "description": "Reply to project deadline email",
            "duration": "30m",
            "priority": "high",
            "action": "respond",
            "source": "email",
        }
    ],
    "afternoonTasks": [
        {
            "time": "13:00",
            "description": "Prepare slides for review",
            "duration": "2h",
            "priority": "medium",
            "action": "work",
            "source": "task",
        }
    ],
    "eveningTasks": [],
    "totalTasksToday": 2,
    "urgentTasks": 0,
    "importantMeetings": [
        {
            "time": "11:00",
            "description": "Weekly sync",
            "duration": "1h",
            "participants": ["alice@example.com"],
        }
    ],
}

RULES = (
    "Morning tasks are scheduled between 09:00 and 12:00.",
    "Afternoon tasks are scheduled between 12:00 and 16:00.",
    "Evening tasks are scheduled between 16:00 and 18:00.",
    'Durations are written as "<n>m" for minutes or "<n>h" for hours.',
    'Priority is one of "low", "medium", "high", "urgent".',
    'Source is one of "email", "calendar", "task", "system".',
    "All times use the 24-hour format HH:MM.",
    "Urgent items and time conflicts are scheduled first.",
    "Respond with the JSON object only, without commentary.",
)


def _dump(value: Any) -> str:
    # Provider payloads may carry datetimes; str() keeps them readable.
    return json.dumps(value, ensure_ascii=False, default=str)


def build_schedule_prompt(
    emails: Sequence[NormalizedEmail],
    calendar_events: Sequence[Dict[str, Any]],
    tasks: Sequence[Dict[str, Any]],
) -> str:
    """Render the instruction text sent to the model for one day plan."""
    rules = "\n".join(f"- {rule}" for rule in RULES)
    return (
        "You are a planning assistant. Build today's schedule from the emails, "
        "calendar events and tasks below.\n\n"
        f"Return JSON with exactly this shape:\n{json.dumps(OUTPUT_SHAPE, indent=2)}\n\n"
        f"Rules:\n{rules}\n\n"
        f"Emails: {_dump([email.to_dict() for email in emails])}\n"
        f"Calendar Events: {_dump(list(calendar_events))}\n"
        f"Tasks: {_dump(list(tasks))}\n"
    )
