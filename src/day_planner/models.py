from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

TASK_ENTRY_FIELDS = ("time", "description", "duration", "priority", "action", "source")
SCHEDULE_FIELDS = (
    "morningTasks",
    "afternoonTasks",
    "eveningTasks",
    "totalTasksToday",
    "urgentTasks",
    "importantMeetings",
)
TIME_BLOCKS = ("morningTasks", "afternoonTasks", "eveningTasks")
MEETING_FIELDS = ("time", "description", "duration", "participants")


@dataclass(frozen=True)
class Identity:
    # Local user key (task store) plus the Google access token for that user.
    user_id: str
    access_token: str


@dataclass(frozen=True)
class NormalizedEmail:
    id: str
    subject: str
    from_email: str
    body: str
    snippet: str
    keyword: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "subject": self.subject,
            "from": self.from_email,
            "body": self.body,
            "snippet": self.snippet,
            "keyword": self.keyword,
        }


@dataclass(frozen=True)
class TaskBlockEntry:
    time: str
    description: str
    duration: str
    priority: str
    action: str
    source: str
    # Fields the model added on its own are kept verbatim.
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskBlockEntry":
        known = {name: data[name] for name in TASK_ENTRY_FIELDS}
        extra = {k: v for k, v in data.items() if k not in TASK_ENTRY_FIELDS}
        return cls(**known, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update(
            time=self.time,
            description=self.description,
            duration=self.duration,
            priority=self.priority,
            action=self.action,
            source=self.source,
        )
        return out


@dataclass(frozen=True)
class MeetingEntry:
    time: str
    description: str
    duration: str
    participants: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update(
            time=self.time,
            description=self.description,
            duration=self.duration,
            participants=list(self.participants),
        )
        return out


@dataclass(frozen=True)
class DailySchedule:
    morning_tasks: List[TaskBlockEntry] = field(default_factory=list)
    afternoon_tasks: List[TaskBlockEntry] = field(default_factory=list)
    evening_tasks: List[TaskBlockEntry] = field(default_factory=list)
    total_tasks_today: int = 0
    urgent_tasks: int = 0
    important_meetings: List[MeetingEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the model is asked to produce."""
        return {
            "morningTasks": [t.to_dict() for t in self.morning_tasks],
            "afternoonTasks": [t.to_dict() for t in self.afternoon_tasks],
            "eveningTasks": [t.to_dict() for t in self.evening_tasks],
            "totalTasksToday": self.total_tasks_today,
            "urgentTasks": self.urgent_tasks,
            "importantMeetings": [m.to_dict() for m in self.important_meetings],
        }
