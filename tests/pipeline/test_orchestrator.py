from __future__ import annotations

import asyncio
import base64
import json
import time
from typing import Any, Dict, List, Optional

import pytest

from day_planner.config.settings import PlannerSettings
from day_planner.errors import DecodeError, ProviderFetchError
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import WorkflowOrchestrator, get_email_details, run_bounded
from day_planner.providers import ProviderSet

IDENTITY = Identity(user_id="u1", access_token="token")


def _raw(mid: str, subject: str, body: str) -> Dict[str, Any]:
    data = base64.urlsafe_b64encode(body.encode("utf-8")).decode("ascii")
    return {
        "id": mid,
        "snippet": body[:10],
        "payload": {
            "mimeType": "text/plain",
            "headers": [{"name": "Subject", "value": subject}],
            "body": {"data": data},
        },
    }


class FakeEmail:
    def __init__(self, messages: List[Dict[str, Any]], delay: float = 0.0, error: Optional[Exception] = None):
        self.messages = messages
        self.delay = delay
        self.error = error
        self.limits: List[int] = []

    def list_raw_messages(self, limit: int) -> List[Dict[str, Any]]:
        self.limits.append(limit)
        time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.messages[:limit]

    def get_raw_message(self, message_id: str) -> Dict[str, Any]:
        return next(m for m in self.messages if m["id"] == message_id)


class FakeCalendar:
    def __init__(self, events: List[Dict[str, Any]], delay: float = 0.0):
        self.events = events
        self.delay = delay

    def list_events(self, time_min=None, time_max=None) -> List[Dict[str, Any]]:
        time.sleep(self.delay)
        return self.events


class FakeTasks:
    def __init__(self, tasks: List[Dict[str, Any]], delay: float = 0.0):
        self.tasks = tasks
        self.delay = delay

    def list_tasks(self) -> List[Dict[str, Any]]:
        time.sleep(self.delay)
        return self.tasks


class FakeModel:
    def __init__(self, response: str = "", delay: float = 0.0):
        self.response = response
        self.delay = delay
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        time.sleep(self.delay)
        return self.response


VALID_RESPONSE = json.dumps(
    {
        "morningTasks": [
            {
                "time": "09:00",
                "description": "Prepare for team meeting",
                "duration": "30m",
                "priority": "high",
                "action": "prepare",
                "source": "email",
            }
        ],
        "afternoonTasks": [],
        "eveningTasks": [],
        "totalTasksToday": 1,
        "urgentTasks": 0,
        "importantMeetings": [],
    }
)


def _orchestrator(providers: ProviderSet, model: FakeModel, **settings: Any) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(
        connect=lambda identity: providers,
        model=model,
        settings=PlannerSettings(**settings),
    )


def test_synthesizes_schedule_from_all_sources() -> None:
    email = FakeEmail([_raw("a", "Team meeting", "Agenda attached"), _raw("b", "Lunch?", "pizza")])
    providers = ProviderSet(
        email=email,
        calendar=FakeCalendar([{"summary": "Standup"}]),
        tasks=FakeTasks([{"title": "Write report"}]),
    )
    model = FakeModel(VALID_RESPONSE)

    schedule = asyncio.run(_orchestrator(providers, model, max_emails=5).synthesize_daily_schedule(IDENTITY))

    assert schedule.morning_tasks[0].description == "Prepare for team meeting"
    assert email.limits == [5]
    prompt = model.prompts[0]
    assert "Agenda attached" in prompt
    assert "pizza" not in prompt
    assert "Standup" in prompt
    assert "Write report" in prompt


def test_fetches_run_concurrently() -> None:
    delay = 0.4
    providers = ProviderSet(
        email=FakeEmail([], delay=delay),
        calendar=FakeCalendar([], delay=delay),
        tasks=FakeTasks([], delay=delay),
    )

    started = time.perf_counter()
    asyncio.run(_orchestrator(providers, FakeModel(VALID_RESPONSE)).synthesize_daily_schedule(IDENTITY))
    elapsed = time.perf_counter() - started

    # Sequential fetching would need at least 3 * delay.
    assert elapsed < 2 * delay


def test_fetch_failure_propagates() -> None:
    providers = ProviderSet(
        email=FakeEmail([], error=ConnectionError("gmail down")),
        calendar=FakeCalendar([]),
        tasks=FakeTasks([]),
    )
    model = FakeModel(VALID_RESPONSE)

    with pytest.raises(ProviderFetchError) as excinfo:
        asyncio.run(_orchestrator(providers, model).synthesize_daily_schedule(IDENTITY))

    assert excinfo.value.source == "email"
    assert isinstance(excinfo.value.cause, ConnectionError)
    assert model.prompts == []


def test_provider_errors_are_not_rewrapped() -> None:
    original = ProviderFetchError("email", "quota exceeded")
    providers = ProviderSet(email=FakeEmail([], error=original), calendar=FakeCalendar([]), tasks=FakeTasks([]))

    with pytest.raises(ProviderFetchError) as excinfo:
        asyncio.run(_orchestrator(providers, FakeModel()).synthesize_daily_schedule(IDENTITY))

    assert excinfo.value is original


def test_slow_fetch_times_out_as_fetch_error() -> None:
    providers = ProviderSet(
        email=FakeEmail([]),
        calendar=FakeCalendar([], delay=0.5),
        tasks=FakeTasks([]),
    )

    with pytest.raises(ProviderFetchError) as excinfo:
        asyncio.run(
            _orchestrator(providers, FakeModel(), fetch_timeout=0.05).synthesize_daily_schedule(IDENTITY)
        )

    assert excinfo.value.source == "calendar"
    assert "timed out" in str(excinfo.value)


def test_slow_model_times_out_as_fetch_error() -> None:
    providers = ProviderSet(email=FakeEmail([]), calendar=FakeCalendar([]), tasks=FakeTasks([]))

    with pytest.raises(ProviderFetchError) as excinfo:
        asyncio.run(
            _orchestrator(providers, FakeModel(VALID_RESPONSE, delay=0.5), model_timeout=0.05)
            .synthesize_daily_schedule(IDENTITY)
        )

    assert excinfo.value.source == "model"


def test_malformed_model_output_degrades_to_fallback() -> None:
    providers = ProviderSet(email=FakeEmail([]), calendar=FakeCalendar([]), tasks=FakeTasks([]))

    schedule = asyncio.run(
        _orchestrator(providers, FakeModel("I cannot help with that.")).synthesize_daily_schedule(IDENTITY)
    )

    assert schedule.total_tasks_today == 1
    assert schedule.morning_tasks[0].source == "system"


def test_get_email_details_skips_relevance_filter() -> None:
    email = FakeEmail([_raw("x", "Lunch plans", "Noon?\nOn Mon Ann wrote:\nold")])

    details = get_email_details(email, "x")

    assert details.keyword == "none"
    assert details.body == "Noon?"


def test_run_bounded_passes_decode_errors_through() -> None:
    broken = _raw("m1", "Meeting", "x")
    broken["payload"]["body"]["data"] = "!!!"
    email = FakeEmail([broken])

    with pytest.raises(DecodeError):
        asyncio.run(run_bounded("email", get_email_details, email, "m1", timeout=1.0))
