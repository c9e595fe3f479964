from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, Query

from backend.app.deps import get_connect, get_identity, get_settings
from day_planner.config.settings import PlannerSettings
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import fetch_normalized_emails, get_email_details, run_bounded
from day_planner.providers import ProviderSet

router = APIRouter()


@router.get("/emails")
async def list_emails(
    max_results: int = Query(default=20, ge=1, le=100),
    identity: Identity = Depends(get_identity),
    connect: Callable[[Identity], ProviderSet] = Depends(get_connect),
    settings: PlannerSettings = Depends(get_settings),
) -> dict:
    providers = connect(identity)
    # Gmail client is blocking; run it off the event loop under the fetch deadline.
    emails = await run_bounded(
        "email", fetch_normalized_emails, providers.email, max_results, timeout=settings.fetch_timeout
    )
    return {"ok": True, "emails": [email.to_dict() for email in emails]}


@router.get("/emails/{message_id}")
async def email_details(
    message_id: str,
    identity: Identity = Depends(get_identity),
    connect: Callable[[Identity], ProviderSet] = Depends(get_connect),
    settings: PlannerSettings = Depends(get_settings),
) -> dict:
    providers = connect(identity)
    email = await run_bounded(
        "email", get_email_details, providers.email, message_id, timeout=settings.fetch_timeout
    )
    return {"ok": True, "email": email.to_dict()}
