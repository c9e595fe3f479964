from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol


class EmailProvider(Protocol):
    def list_raw_messages(self, limit: int) -> List[Dict[str, Any]]: ...
    def get_raw_message(self, message_id: str) -> Dict[str, Any]: ...


class CalendarProvider(Protocol):
    def list_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]: ...


class TaskStore(Protocol):
    def list_tasks(self) -> List[Dict[str, Any]]: ...


class GenerativeModelClient(Protocol):
    def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class ProviderSet:
    # Data sources bound to a single user for the duration of one request.
    email: EmailProvider
    calendar: CalendarProvider
    tasks: TaskStore
