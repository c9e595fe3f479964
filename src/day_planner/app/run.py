# src/day_planner/app/run.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from typing import List, Optional

from day_planner.config.logs import configure_logging
from day_planner.config.settings import LOGS_DIR, PlannerSettings
from day_planner.errors import DayPlannerError
from day_planner.google_api.auth import default_auth_config, load_local_credentials
from day_planner.google_api.providers import google_providers
from day_planner.llm.client import OpenAIModelClient
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import WorkflowOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(settings: PlannerSettings) -> WorkflowOrchestrator:
    model = OpenAIModelClient(model=settings.model, timeout=settings.model_timeout)
    return WorkflowOrchestrator(
        connect=lambda identity: google_providers(identity, settings),
        model=model,
        settings=settings,
    )


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="day-planner",
        description="Build today's schedule from Gmail, Google Calendar and local tasks.",
    )
    parser.add_argument("--user", default="me", help="Local user id for the task store.")
    parser.add_argument("--max-emails", type=int, help="How many recent emails to read.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = PlannerSettings.from_env()
    if args.max_emails:
        settings = replace(settings, max_emails=args.max_emails)
    configure_logging(LOGS_DIR, "DEBUG" if args.verbose else settings.log_level)

    try:
        creds = load_local_credentials(default_auth_config())
        identity = Identity(user_id=args.user, access_token=creds.token)
        schedule = asyncio.run(build_orchestrator(settings).synthesize_daily_schedule(identity))
    except DayPlannerError as exc:
        logger.error("Could not build schedule: %s", exc)
        return 1

    print(json.dumps(schedule.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
