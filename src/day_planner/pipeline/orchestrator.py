from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, TypeVar

from day_planner.config.settings import PlannerSettings
from day_planner.errors import DecodeError, ProviderFetchError
from day_planner.models import DailySchedule, Identity, NormalizedEmail
from day_planner.pipeline.normalize import build_email, normalize_emails
from day_planner.pipeline.prompt import build_schedule_prompt
from day_planner.pipeline.schedule_parser import parse_schedule_response
from day_planner.providers import EmailProvider, GenerativeModelClient, ProviderSet

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_bounded(source: str, fn: Callable[..., T], *args: Any, timeout: float) -> T:
    """
    Run a blocking provider call in a worker thread with a deadline.
    Timeouts and unexpected errors surface as ProviderFetchError(source);
    a DecodeError for a single message is passed through unchanged.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=timeout)
    except (ProviderFetchError, DecodeError):
        raise
    except asyncio.TimeoutError as exc:
        raise ProviderFetchError(source, f"timed out after {timeout:g}s", cause=exc) from exc
    except Exception as exc:
        raise ProviderFetchError(source, f"{type(exc).__name__}: {exc}", cause=exc) from exc


def fetch_normalized_emails(provider: EmailProvider, limit: int) -> List[NormalizedEmail]:
    return normalize_emails(provider.list_raw_messages(limit))


def get_email_details(provider: EmailProvider, message_id: str) -> NormalizedEmail:
    """Normalize a single message by id; the relevance filter is not applied."""
    return build_email(provider.get_raw_message(message_id))


class WorkflowOrchestrator:
    """Fetch a user's emails, events and tasks, and ask the model for a day plan."""

    def __init__(
        self,
        connect: Callable[[Identity], ProviderSet],
        model: GenerativeModelClient,
        settings: Optional[PlannerSettings] = None,
    ):
        self._connect = connect
        self._model = model
        self._settings = settings or PlannerSettings()

    async def synthesize_daily_schedule(self, identity: Identity) -> DailySchedule:
        settings = self._settings
        providers = self._connect(identity)

        started = time.perf_counter()
        # Independent sources: total latency is the slowest fetch, not the sum.
        try:
            emails, events, tasks = await asyncio.gather(
                run_bounded(
                    "email",
                    fetch_normalized_emails,
                    providers.email,
                    settings.max_emails,
                    timeout=settings.fetch_timeout,
                ),
                run_bounded(
                    "calendar", providers.calendar.list_events, timeout=settings.fetch_timeout
                ),
                run_bounded("tasks", providers.tasks.list_tasks, timeout=settings.fetch_timeout),
            )
        except ProviderFetchError as exc:
            logger.error("Fetch failed for user %s: %s", identity.user_id, exc)
            raise
        logger.info(
            "Fetched %d emails, %d events, %d tasks in %.2fs",
            len(emails),
            len(events),
            len(tasks),
            time.perf_counter() - started,
        )

        prompt = build_schedule_prompt(emails, events, tasks)

        started = time.perf_counter()
        response = await run_bounded(
            "model", self._model.complete, prompt, timeout=settings.model_timeout
        )
        logger.info("Model answered in %.2fs", time.perf_counter() - started)

        return parse_schedule_response(response)
