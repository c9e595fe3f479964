from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from day_planner.errors import ProviderFetchError

logger = logging.getLogger(__name__)


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class CalendarClient:
    """CalendarProvider reading single events from the primary Google calendar."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        calendar_id: str = "primary",
        window_days: int = 30,
    ):
        self._calendar_id = calendar_id
        self._window = timedelta(days=window_days)
        self._service = build("calendar", "v3", credentials=credentials, cache_discovery=False)

    def list_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        # Default window: now until now + window_days.
        start = time_min or datetime.now(timezone.utc)
        end = time_max or start + self._window
        try:
            resp = (
                self._service.events()
                .list(
                    calendarId=self._calendar_id,
                    timeMin=_rfc3339(start),
                    timeMax=_rfc3339(end),
                    singleEvents=True,
                    orderBy="startTime",
                )
                .execute()
            )
        except HttpError as exc:
            raise ProviderFetchError(
                "calendar", f"Calendar request failed: {exc}", cause=exc
            ) from exc
        events = resp.get("items", [])
        logger.debug("Fetched %d calendar events", len(events))
        return events
