from __future__ import annotations

from pathlib import Path
from typing import Optional

from day_planner.config.settings import TASKS_DIR, PlannerSettings
from day_planner.google_api.auth import credentials_from_token
from day_planner.google_api.calendar import CalendarClient
from day_planner.google_api.gmail import GmailClient
from day_planner.models import Identity
from day_planner.providers import ProviderSet
from day_planner.storage.tasks import JsonTaskStore


def google_providers(
    identity: Identity,
    settings: PlannerSettings,
    *,
    tasks_dir: Optional[Path] = None,
) -> ProviderSet:
    """Bind Gmail, Google Calendar and the local task store to one user."""
    creds = credentials_from_token(identity.access_token)
    return ProviderSet(
        email=GmailClient(creds),
        calendar=CalendarClient(creds, window_days=settings.calendar_days),
        tasks=JsonTaskStore.for_user(tasks_dir or TASKS_DIR, identity.user_id),
    )
