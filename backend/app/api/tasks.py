from __future__ import annotations

from dataclasses import asdict
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.app.deps import get_task_store
from day_planner.storage.tasks import JsonTaskStore, Task

router = APIRouter()


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = ""
    status: Literal["pending", "in-progress", "completed"] = "pending"
    priority: Literal["low", "medium", "high"] = "medium"
    due_date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    status: Optional[Literal["pending", "in-progress", "completed"]] = None
    priority: Optional[Literal["low", "medium", "high"]] = None
    due_date: Optional[str] = None
    tags: Optional[List[str]] = None


class TaskStatusUpdate(BaseModel):
    status: Literal["pending", "in-progress", "completed"]


@router.get("/tasks")
def list_tasks(store: JsonTaskStore = Depends(get_task_store)) -> dict:
    return {"ok": True, "tasks": store.list_tasks()}


@router.post("/tasks", status_code=201)
def create_task(body: TaskCreate, store: JsonTaskStore = Depends(get_task_store)) -> dict:
    try:
        task = store.add_task(Task(**body.model_dump()))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "task": task.id}


@router.put("/tasks/{task_id}")
def update_task(
    task_id: str,
    body: TaskUpdate,
    store: JsonTaskStore = Depends(get_task_store),
) -> dict:
    # Only fields present in the request body are changed; due_date may be cleared with null.
    fields = body.model_dump(exclude_unset=True)
    for name in ("title", "content", "status", "priority", "tags"):
        if name in fields and fields[name] is None:
            raise HTTPException(status_code=400, detail=f"{name} must not be null")
    try:
        task = store.update_task(task_id, **fields)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "task": asdict(task)}


@router.patch("/tasks/{task_id}/status")
def update_status(
    task_id: str,
    body: TaskStatusUpdate,
    store: JsonTaskStore = Depends(get_task_store),
) -> dict:
    try:
        task = store.update_task_status(task_id, body.status)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"ok": True, "task": task.id, "status": task.status}


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, store: JsonTaskStore = Depends(get_task_store)) -> dict:
    try:
        store.delete_task(task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"ok": True}
