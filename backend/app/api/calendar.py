from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.deps import get_connect, get_identity, get_settings
from day_planner.config.settings import PlannerSettings
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import run_bounded
from day_planner.providers import ProviderSet

router = APIRouter()


@router.get("/calendar/events")
async def list_events(
    time_min: Optional[datetime] = Query(default=None),
    time_max: Optional[datetime] = Query(default=None),
    identity: Identity = Depends(get_identity),
    connect: Callable[[Identity], ProviderSet] = Depends(get_connect),
    settings: PlannerSettings = Depends(get_settings),
) -> dict:
    if time_min and time_max and time_max < time_min:
        raise HTTPException(status_code=400, detail="time_max must not be before time_min")
    providers = connect(identity)
    events = await run_bounded(
        "calendar",
        providers.calendar.list_events,
        time_min,
        time_max,
        timeout=settings.fetch_timeout,
    )
    return {"ok": True, "events": events}
