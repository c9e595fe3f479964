from __future__ import annotations

import json
import os
import re
import tempfile
import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

TASK_STATUSES = ("pending", "in-progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")
TASK_FIELDS = ("title", "content", "status", "priority", "due_date", "tags")

# One lock per task file, shared by every store instance pointing at it.
_FILE_LOCKS: Dict[Path, Lock] = {}
_FILE_LOCKS_GUARD = Lock()


def _lock_for(path: Path) -> Lock:
    key = path.resolve()
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(key, Lock())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Task:
    title: str
    content: str = ""
    status: str = "pending"
    priority: str = "medium"
    due_date: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    def __post_init__(self) -> None:
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Task title must not be empty")
        if self.status not in TASK_STATUSES:
            raise ValueError(f"Invalid status: {self.status}")
        if self.priority not in TASK_PRIORITIES:
            raise ValueError(f"Invalid priority: {self.priority}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        # Keep load resilient to legacy/extra fields.
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


class JsonTaskStore:
    """TaskStore keeping one user's tasks in a JSON file."""

    def __init__(self, path: Path):
        self._path = path

    @classmethod
    def for_user(cls, tasks_dir: Path, user_id: str) -> "JsonTaskStore":
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", user_id) or "default"
        return cls(tasks_dir / f"{safe}.json")

    def _load(self) -> List[Task]:
        if not self._path.exists():
            return []
        data = json.loads(self._path.read_text(encoding="utf-8"))
        return [Task.from_dict(item) for item in data.get("tasks") or []]

    def _save(self, tasks: List[Task]) -> None:
        # Sibling temp file swapped in; readers never see a partial file.
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"tasks": [asdict(task) for task in tasks]}
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    def list_tasks(self) -> List[Dict[str, Any]]:
        with _lock_for(self._path):
            return [asdict(task) for task in self._load()]

    def add_task(self, task: Task) -> Task:
        with _lock_for(self._path):
            tasks = self._load()
            tasks.append(task)
            self._save(tasks)
        return task

    def update_task(self, task_id: str, **fields: Any) -> Task:
        """Change any editable task field; the updated task is validated before saving."""
        unknown = sorted(set(fields) - set(TASK_FIELDS))
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(unknown)}")
        with _lock_for(self._path):
            tasks = self._load()
            for index, task in enumerate(tasks):
                if task.id == task_id:
                    updated = replace(task, **fields, updated_at=_now_iso())
                    tasks[index] = updated
                    self._save(tasks)
                    return updated
        raise KeyError(f"Task not found: {task_id}")

    def update_task_status(self, task_id: str, status: str) -> Task:
        if status not in TASK_STATUSES:
            raise ValueError(f"Invalid status: {status}")
        return self.update_task(task_id, status=status)

    def delete_task(self, task_id: str) -> None:
        with _lock_for(self._path):
            tasks = self._load()
            remaining = [task for task in tasks if task.id != task_id]
            if len(remaining) == len(tasks):
                raise KeyError(f"Task not found: {task_id}")
            self._save(remaining)
