from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.app.deps import get_identity, get_orchestrator
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import WorkflowOrchestrator

router = APIRouter()


@router.post("/schedule")
async def generate_schedule(
    identity: Identity = Depends(get_identity),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
) -> dict:
    schedule = await orchestrator.synthesize_daily_schedule(identity)
    return {"ok": True, "schedule": schedule.to_dict()}
